from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum, func
from goaltree.database import Base
from goaltree.models.enums import ContainerKind, NodeStatus


class Goal(Base):
    """Container record: a goal, milestone or requirement."""

    __tablename__ = "goals"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    parent_id = Column(Integer, ForeignKey("goals.id"), nullable=True, index=True)  # NULL = root
    kind = Column(Enum(ContainerKind, native_enum=False, length=16), nullable=False, default=ContainerKind.goal)
    status = Column(Enum(NodeStatus, native_enum=False, length=16), nullable=False, default=NodeStatus.active)
    order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<Goal(id={self.id}, kind={self.kind}, title='{self.title}', parent_id={self.parent_id})>"
