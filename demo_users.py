"""
Demo Users Data for the Project Tracker
The first account is the super-admin; every other ADMIN sees all projects
"""

# Demo Users Data
# Structure: username, display name, email, password, role
DEMO_USERS = [
    {
        "username": "nkc",
        "name": "NKC",
        "email": None,
        "password": "password123",
        "role": "ADMIN",
    },
    {
        "username": "sarada",
        "name": "Sarada",
        "email": None,
        "password": "password123",
        "role": "ADMIN",
    },
    {
        "username": "rahul",
        "name": "Rahul",
        "email": None,
        "password": "password123",
        "role": "USER",
    },
]
