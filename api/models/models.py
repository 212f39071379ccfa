from api.config import Base
from sqlalchemy import Column, Integer, String, JSON, DateTime, Text
from datetime import datetime


class Course(Base):
    __tablename__ = "courses"
    id = Column(String, primary_key=True, index=True)  # uuid
    owner_id = Column(String, index=True, nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    level = Column(String, nullable=False)  # Beginner|Intermediate|Advanced
    image_url = Column(String, nullable=False)
    project_description = Column(Text, nullable=True)
    chapters = Column(JSON, nullable=False, default=list)  # list of chapter documents
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # UPDATE ... WHERE version = :loaded; a concurrent writer makes flush raise StaleDataError.
    __mapper_args__ = {"version_id_col": version}


class XPProfile(Base):
    __tablename__ = "xp_profiles"
    user_id = Column(String, primary_key=True, index=True)
    total_xp = Column(Integer, default=0, nullable=False, index=True)
    current_level = Column(Integer, default=1, nullable=False)
    xp_to_next_level = Column(Integer, default=100, nullable=False)
    streak = Column(JSON, nullable=False)  # {current, longest, last_activity}
    achievements = Column(JSON, nullable=False, default=list)
    daily_xp = Column(JSON, nullable=False)  # {date, earned}
    weekly_xp = Column(JSON, nullable=False)  # {week_start, earned}
    xp_history = Column(JSON, nullable=False, default=list)  # append-only
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __mapper_args__ = {"version_id_col": version}
