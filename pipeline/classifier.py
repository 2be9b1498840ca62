from core.draft_schema import Turn
from core.image_utils import contains_color
from core.layout import RegionResult


class TurnClassifier:
    def __init__(self):
        # Checked in order, first swatch found wins
        self.rules = {
            Turn.BLUE: "timer.blue",
            Turn.RED: "timer.red",
            Turn.BAN: "timer.ban",
        }

    def classify(self, result: RegionResult) -> Turn:
        if result.image is None:
            return Turn.NONE

        for turn, swatch in self.rules.items():
            if contains_color(result.image, result.colors(swatch)):
                return turn

        return Turn.NONE
