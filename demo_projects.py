"""
Demo Projects Data for the Project Tracker
Each project starts with one task per board column
"""

# Demo Projects Data
# Structure: Project Name, Description, explicit (non-admin) members, Tasks
DEMO_PROJECTS = [
    {
        "name": "My Portfolio",
        "description": "Personal portfolio website",
        "members": [],
    },
    {
        "name": "EZ Cut Media",
        "description": "Video editing agency",
        "members": ["rahul"],
    },
    {
        "name": "Digital Concierge",
        "description": "Lifestyle management app",
        "members": [],
    },
]

DEMO_TASKS = [
    {"title": "Setup Repo", "status": "COMPLETED"},
    {"title": "Design UI", "status": "IN_PROGRESS"},
    {"title": "Deploy", "status": "TO_START"},
]
