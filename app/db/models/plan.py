from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, JSON
from sqlalchemy.sql import func
from app.db.base import Base


class Plan(Base):
    """
    Pricing configuration maintained by the master admin.

    Costs are per day: `per_user_cost` for each user and `cost_per_module`
    for each entry in `module_costs`.
    """
    __tablename__ = "plans"

    id = Column(Integer, primary_key=True, index=True)
    per_user_cost = Column(Float, nullable=False, default=0)
    module_costs = Column(JSON, nullable=False, default=list)  # [{"module_name": ..., "cost_per_module": ...}]
    currency = Column(String(3), nullable=False, default="USD")
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_by = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def module_cost(self, module_name: str):
        """Per-day cost of a module, or None if the plan does not offer it."""
        for entry in self.module_costs or []:
            if entry.get("module_name") == module_name:
                return float(entry.get("cost_per_module") or 0)
        return None
