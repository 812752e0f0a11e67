# plan_admin/schemas/migration.py
from pydantic import BaseModel, Field


class MigrationStats(BaseModel):
    total_plans: int = 0
    total_weeks: int = 0
    total_days: int = 0
    total_workouts: int = 0
    workouts_updated: int = 0
    workouts_skipped: int = 0
    already_migrated: int = 0
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
