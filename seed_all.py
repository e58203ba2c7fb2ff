"""
Master Database Seeding Script
Creates database tables and populates them with demo users, projects and tasks.
Safe to run more than once: existing users and projects are left alone.
"""

import sys
from datetime import datetime

from sqlalchemy.orm import Session

from app.database import SessionLocal
from app.models import Project, User
from app.services import task_lifecycle
from app.services.membership import sync_admin_memberships
from app.utils.security import hash_password
from create_tables import create_tables

from demo_users import DEMO_USERS
from demo_projects import DEMO_PROJECTS, DEMO_TASKS

def seed_demo_users(db: Session) -> int:
    created = 0
    for data in DEMO_USERS:
        if db.query(User).filter(User.username == data["username"]).first():
            print(f"   - User {data['username']} already exists, skipping")
            continue
        db.add(User(
            username=data["username"],
            name=data["name"],
            email=data["email"],
            hashed_password=hash_password(data["password"]),
            role=data["role"],
        ))
        created += 1
        print(f"   + Created user: {data['username']}")
    db.flush()
    return created

def seed_demo_projects(db: Session) -> int:
    created = 0
    for data in DEMO_PROJECTS:
        if db.query(Project).filter(Project.name == data["name"]).first():
            print(f"   - Project {data['name']} already exists, skipping")
            continue

        project = Project(name=data["name"], description=data["description"])
        project.users = db.query(User).filter(User.username.in_(data["members"])).all() if data["members"] else []
        db.add(project)
        db.flush()

        for task_data in DEMO_TASKS:
            task = task_lifecycle.new_task(project_id=project.id, title=task_data["title"])
            task_lifecycle.transition(task, task_data["status"])
            db.add(task)

        created += 1
        print(f"   + Created project: {project.name}")

    # Admins see every project, including ones created before they existed
    sync_admin_memberships(db)
    return created

def seed(db: Session) -> dict:
    users = seed_demo_users(db)
    projects = seed_demo_projects(db)
    db.commit()
    return {"users": users, "projects": projects}

def main():
    print(f"\n{'='*60}")
    print("🚀 Seeding Project Tracker Database")
    print(f"{'='*60}")

    if not create_tables():
        sys.exit(1)

    db = SessionLocal()
    try:
        summary = seed(db)
    except Exception as e:
        db.rollback()
        print(f"[ERROR] Seeding failed: {e}")
        sys.exit(1)
    finally:
        db.close()

    print(f"\n{'='*60}")
    print("📊 SEEDING SUMMARY")
    print(f"{'='*60}")
    print(f"Users created: {summary['users']}")
    print(f"Projects created: {summary['projects']}")
    print(f"\n[INFO] Login Credentials:")
    print(f"   - Super-admin: nkc / password123")
    print(f"   - Admin: sarada / password123")
    print(f"   - User (EZ Cut Media only): rahul / password123")
    print(f"\nCompleted at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")

if __name__ == "__main__":
    main()
