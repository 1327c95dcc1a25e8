"""
Electronic signatures - typed names and hand-drawn strokes rendered to PNG data URIs
"""
import base64
from io import BytesIO

from PIL import Image, ImageDraw

from training.exceptions import SignatureValidationError

MIN_TYPED_LENGTH = 3
CANVAS_SIZE = (400, 150)
STROKE_WIDTH = 2
PNG_DATA_URI_PREFIX = 'data:image/png;base64,'


def _point(raw) -> tuple:
    if isinstance(raw, dict):
        return float(raw['x']), float(raw['y'])
    x, y = raw
    return float(x), float(y)


def normalize_strokes(strokes) -> list:
    """Turn raw stroke data into lists of (x, y) tuples, dropping empty strokes"""
    normalized = []
    for stroke in strokes or []:
        try:
            points = [_point(p) for p in stroke]
        except (KeyError, TypeError, ValueError) as e:
            raise SignatureValidationError(f'Invalid signature stroke: {e}')
        if points:
            normalized.append(points)
    return normalized


def typed_signature(text) -> str:
    """Validate a typed signature and return it trimmed"""
    value = (text or '').strip()
    if len(value) < MIN_TYPED_LENGTH:
        raise SignatureValidationError(f'Typed signature must be at least {MIN_TYPED_LENGTH} characters')
    return value


def render_strokes(strokes, size: tuple = CANVAS_SIZE) -> str:
    """
    Render drawn strokes onto a white canvas and return a PNG data URI.

    A single-point stroke is drawn as a dot so a tap still leaves a mark.
    """
    normalized = normalize_strokes(strokes)
    if not normalized:
        raise SignatureValidationError('Please draw your signature')

    image = Image.new('RGB', size, 'white')
    draw = ImageDraw.Draw(image)
    for points in normalized:
        if len(points) == 1:
            x, y = points[0]
            draw.ellipse((x - STROKE_WIDTH, y - STROKE_WIDTH, x + STROKE_WIDTH, y + STROKE_WIDTH), fill='black')
        else:
            draw.line(points, fill='black', width=STROKE_WIDTH, joint='curve')

    buffer = BytesIO()
    image.save(buffer, format='PNG')
    return PNG_DATA_URI_PREFIX + base64.b64encode(buffer.getvalue()).decode('ascii')


def is_drawn_signature(value) -> bool:
    return isinstance(value, str) and value.startswith(PNG_DATA_URI_PREFIX)
