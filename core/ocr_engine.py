# core/ocr_engine.py

import cv2
import numpy as np
import pytesseract
from PIL import Image


def preprocess_for_ocr(pil_img: Image.Image, scale: int = 3):
    """
    Light text on dark UI plates: upscale, then Otsu with inversion so
    tesseract gets dark glyphs on white.
    """
    img = np.array(pil_img.convert("RGB"))

    gray = cv2.cvtColor(img, cv2.COLOR_RGB2GRAY)

    h, w = gray.shape
    gray = cv2.resize(gray, (w * scale, h * scale), interpolation=cv2.INTER_CUBIC)

    gray = cv2.GaussianBlur(gray, (3, 3), 0)

    _, binary = cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY_INV + cv2.THRESH_OTSU)

    return binary


def extract_text(pil_img: Image.Image, lang: str = "eng", psm: int = 7) -> str:
    processed = preprocess_for_ocr(pil_img)

    text = pytesseract.image_to_string(
        processed,
        lang=lang,
        config=f"--psm {psm}",
    )

    return text.strip()
