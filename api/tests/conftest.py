import os
import uuid
from datetime import date

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.database import Base
from app.models import User, UserProfile
from app.repo import UserDirectory
from app.services.analysis_store import AnalysisStore

TRAIT_NAMES = [
    "introversion",
    "adventurousness",
    "ambition",
    "emotionalOpenness",
    "traditionalValues",
    "independenceNeed",
    "romanticStyle",
    "socialEnergy",
    "communicationStyle",
    "attachmentStyle",
    "planningStyle",
]


def profile_doc(**overrides):
    doc = {
        "values": ["honesty", "loyalty"],
        "interests": ["hiking", "cooking"],
        "dealbreakers": [],
        "traits": {name: 5 for name in TRAIT_NAMES},
        "relationshipStyle": {
            "loveLanguage": "quality_time",
            "conflictStyle": "talk_it_out",
            "communicationFrequency": "daily",
            "financialApproach": "saver",
            "aloneTimeNeed": 5,
        },
        "familyPlans": {"wantsKids": "yes", "familyCloseness": 7},
        "lifestyle": {
            "sleepSchedule": "early_bird",
            "exerciseLevel": "active",
            "alcoholUse": "socially",
            "drugUse": "never",
            "petPreference": "dogs",
            "locationPreference": "city",
        },
    }
    doc.update(overrides)
    return doc


@pytest.fixture
def session_factory(tmp_path):
    # analyzer and fan-out queries run on worker threads
    engine = create_engine(
        f"sqlite:///{tmp_path / 'match.db'}",
        connect_args={"check_same_thread": False},
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False, future=True)
    engine.dispose()


@pytest.fixture
def directory(session_factory):
    return UserDirectory(session_factory)


@pytest.fixture
def store(session_factory):
    return AnalysisStore(session_factory)


@pytest.fixture
def add_user(session_factory):
    def _add(name="Alex", gender="man", sexuality="straight", profile=None, birthdate=date(1995, 6, 1), **fields):
        user_id = str(uuid.uuid4())
        with session_factory() as db:
            db.add(User(id=user_id, name=name, gender=gender, sexuality=sexuality, birthdate=birthdate, **fields))
            if profile is not None:
                db.add(UserProfile(user_id=user_id, profile=profile))
            db.commit()
        return user_id

    return _add


@pytest.fixture
def make_profile():
    return profile_doc
