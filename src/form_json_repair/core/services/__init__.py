# Services package

from .json_validator import JsonValidator
from .repair_pipeline import RepairPipeline, repair

__all__ = [
    "JsonValidator",
    "RepairPipeline",
    "repair",
]
