import re


class TextNormalizer:
    def __init__(self):
        # Frequent OCR glyph confusions on the draft screen font
        self.replace_map = {
            "0": "O",
            "1": "I",
            "5": "S",
            "8": "B",
            "|": "I",
            "’": "'",
            "`": "'",
        }

    def normalize(self, text: str) -> str:
        if not text:
            return ""

        t = text.strip()
        t = t.replace("\n", " ").replace("\r", " ")
        t = re.sub(r"\s+", " ", t)

        for k, v in self.replace_map.items():
            t = t.replace(k, v)

        t = re.sub(r"[^A-Za-zÀ-ÿ .'\-]", "", t)

        return t.strip().upper()
