# scripts/ensure_user.py
from ishanya.core.security import hash_password
from ishanya.db.session import SessionLocal, engine, init_db
from ishanya.models import Parent
from ishanya.models.user import ROLES, User

# (username, password, role, full_name, email)
USERS_TO_ENSURE = [
    ("admin", "admin123", "administrator", "Administrator", "admin@ishanya.local"),
    ("hr", "hr123", "hr", "HR Desk", "hr@ishanya.local"),
    ("teacher", "teacher123", "teacher", "Class Teacher", "teacher@ishanya.local"),
]

# parent logins are matched to the parents table by email
PARENTS_TO_ENSURE = [
    # (email, password, student_id)
    ("parent@ishanya.local", "parent123", 1001),
]

def upsert_user(db, username, password, role, full_name, email):
    if role not in ROLES:
        raise ValueError(f"Unknown role {role!r}; expected one of {ROLES}")
    u = db.query(User).filter(User.username == username).first()
    if u:
        u.password_hash = hash_password(password)
        u.role = role
        if full_name: u.full_name = full_name
        if email: u.email = email
        msg = f"UPDATED {username}"
    else:
        u = User(username=username, password_hash=hash_password(password),
                 role=role, full_name=full_name, email=email, is_active=True)
        db.add(u)
        msg = f"CREATED {username}"
    return msg

def upsert_parent(db, email, password, student_id):
    msg = upsert_user(db, email, password, "parent", None, email)
    p = db.query(Parent).filter(Parent.email == email).first()
    if p:
        p.student_id = student_id
    else:
        db.add(Parent(email=email, student_id=student_id))
    return msg

def main():
    print("DB =", engine.url.render_as_string(hide_password=True))
    init_db()
    db = SessionLocal()
    try:
        for (u, p, r, f, e) in USERS_TO_ENSURE:
            print(upsert_user(db, u, p, r, f, e))
        for (e, p, sid) in PARENTS_TO_ENSURE:
            print(upsert_parent(db, e, p, sid))
        db.commit()
        # show users
        users = db.query(User).all()
        print("Users in DB:", [(x.id, x.username, x.role, x.is_active) for x in users])
    finally:
        db.close()

if __name__ == "__main__":
    main()
