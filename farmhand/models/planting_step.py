from enum import Enum

class PlantingStep(int, Enum):
    DRAW_FARM = 0
    SELECT_CROP = 1
    AI_PLAN = 2
    REVIEW_SAVE = 3

STEP_LABELS = {
    PlantingStep.DRAW_FARM: "Draw Farm",
    PlantingStep.SELECT_CROP: "Select Crop",
    PlantingStep.AI_PLAN: "AI Plan",
    PlantingStep.REVIEW_SAVE: "Review & Save",
}
