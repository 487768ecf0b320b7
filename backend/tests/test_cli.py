# ruff: noqa

import pytest
from sqlalchemy import text
from sqlmodel import Session, select

from prodmgr.cli import analyze_permissions, check_orphaned_jobs, cleanup_orphaned_jobs, list_users, setup_user_roles
from prodmgr.db.session import build_engine, init_db
from prodmgr.models.jobs import Job
from prodmgr.models.projects import Client, Project
from prodmgr.models.users import Role, User, UserRole


@pytest.fixture
def db_url(tmp_path):
    url = f"sqlite:///{tmp_path / 'ops.db'}"
    engine = build_engine(url)
    init_db(engine)
    with Session(engine) as session:
        session.add_all([Project(id=10, name="Fitout"), Client(name="ACME Corp")])
        session.add_all(
            [
                Job(id=1, project_id=10, items="cabinets"),
                Job(id=2, project_id=None, items="panels"),
                Job(id=3, project_id=99, items="vanity"),
            ]
        )
        session.add_all(
            [
                User(id=1, email="owner@example.com", first_name="Olive", password="x"),
                Role(id=1, name="super_admin", display_name="Super Administrator", is_super_admin=True),
            ]
        )
        session.commit()
    engine.dispose()
    return url


def _job_ids(url):
    engine = build_engine(url)
    try:
        with Session(engine) as session:
            return list(session.exec(select(Job.id).order_by(Job.id)).all())
    finally:
        engine.dispose()


def test_check_orphaned_jobs_prints_report(db_url, capsys):
    assert check_orphaned_jobs.main(["--database-url", db_url]) == 0
    out = capsys.readouterr().out
    assert "Total jobs in database: 3" in out
    assert "Jobs with NULL project_id: 1" in out
    assert "Jobs with non-existent project IDs: 1" in out
    assert "Job ID: 3, Project ID: 99, Items: vanity" in out
    assert "Total clients in database: 1" in out


def test_cleanup_dry_run_then_real_run(db_url, capsys):
    assert cleanup_orphaned_jobs.main(["--database-url", db_url, "--dry-run"]) == 0
    assert "Would delete 1 orphaned jobs" in capsys.readouterr().out
    assert _job_ids(db_url) == [1, 2, 3]

    assert cleanup_orphaned_jobs.main(["--database-url", db_url]) == 0
    out = capsys.readouterr().out
    assert "Deleted 1 orphaned jobs" in out
    assert "Remaining jobs: 2" in out
    assert _job_ids(db_url) == [1, 2]


def test_cleanup_refuses_wipe_without_flag(tmp_path, capsys):
    url = f"sqlite:///{tmp_path / 'empty.db'}"
    engine = build_engine(url)
    init_db(engine)
    with Session(engine) as session:
        session.add(Job(id=1, project_id=5, items="x"))
        session.commit()
    engine.dispose()

    assert cleanup_orphaned_jobs.main(["--database-url", url]) == 1
    assert _job_ids(url) == [1]

    assert cleanup_orphaned_jobs.main(["--database-url", url, "--allow-wipe"]) == 0
    assert "Deleted all 1 jobs" in capsys.readouterr().out
    assert _job_ids(url) == []


def test_read_failure_returns_nonzero(tmp_path):
    # Database without any tables: the first query fails.
    url = f"sqlite:///{tmp_path / 'blank.db'}"
    assert check_orphaned_jobs.main(["--database-url", url]) == 1


def test_delete_failure_returns_nonzero(db_url, capsys):
    engine = build_engine(db_url)
    with engine.begin() as conn:
        conn.execute(
            text("CREATE TRIGGER jobs_no_delete BEFORE DELETE ON jobs BEGIN SELECT RAISE(ABORT, 'jobs are locked'); END")
        )
    engine.dispose()

    assert cleanup_orphaned_jobs.main(["--database-url", db_url]) == 1
    assert "Deleted" not in capsys.readouterr().out
    assert _job_ids(db_url) == [1, 2, 3]


def test_list_users_and_permissions(db_url, capsys):
    assert list_users.main(["--database-url", db_url]) == 0
    assert "Email: owner@example.com" in capsys.readouterr().out

    assert analyze_permissions.main(["--database-url", db_url]) == 0
    assert "super_admin - Super Administrator (Super Admin: Yes)" in capsys.readouterr().out


def test_setup_user_roles_previews_by_default(db_url, capsys):
    args = ["--database-url", db_url, "--assign", "owner@example.com=super_admin"]
    assert setup_user_roles.main(args) == 0
    out = capsys.readouterr().out
    assert "owner@example.com -> Super Administrator" in out
    assert "Preview only" in out

    assert setup_user_roles.main(args + ["--execute"]) == 0
    assert "owner@example.com -> Super Administrator (SUPER ADMIN)" in capsys.readouterr().out

    engine = build_engine(db_url)
    with Session(engine) as session:
        assert len(session.exec(select(UserRole)).all()) == 1
    engine.dispose()


def test_setup_user_roles_unknown_role_fails(db_url):
    assert setup_user_roles.main(["--database-url", db_url, "--assign", "owner@example.com=ghost"]) == 1
