from sqlalchemy.orm import declarative_base
import enum

Base = declarative_base()


# ============================================================================
# ENUMS
# ============================================================================

class UpdaterState(str, enum.Enum):
    """Updater run state"""
    IDLE = "idle"
    FETCHING = "fetching"
    FINGERPRINTING = "fingerprinting"
    UNCHANGED = "unchanged"
    TRANSFORMING = "transforming"
    DEDUPLICATING = "deduplicating"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"
