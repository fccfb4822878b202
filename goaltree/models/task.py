from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Boolean, Enum, JSON, func
from goaltree.database import Base
from goaltree.models.enums import TaskFrequency


class Task(Base):
    """Leaf record. Always hangs off a container, never has children."""

    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    parent_id = Column(Integer, ForeignKey("goals.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    frequency = Column(Enum(TaskFrequency, native_enum=False, length=16), nullable=False, default=TaskFrequency.once)
    weekly_days = Column(JSON, nullable=False, default=list)  # 0-6, Sunday first
    is_completed = Column(Boolean, nullable=False, default=False)
    scheduled_date = Column(DateTime(timezone=True), nullable=True)
    measurement = Column(String, nullable=True)
    order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<Task(id={self.id}, title='{self.title}', parent_id={self.parent_id})>"
