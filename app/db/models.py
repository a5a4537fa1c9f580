from app.db.base import Base

# Import all models here
from app.models.surgery import Surgery
from app.models.symptom import BaseSymptom, SurgeryCustomSymptom, SurgerySymptomOverride, SurgerySymptomStatus
from app.models.symptom_review_status import SymptomReviewStatus
from app.models.user import User, UserSurgery

__all__ = [
    "Base",
    "BaseSymptom",
    "Surgery",
    "SurgeryCustomSymptom",
    "SurgerySymptomOverride",
    "SurgerySymptomStatus",
    "SymptomReviewStatus",
    "User",
    "UserSurgery",
]
