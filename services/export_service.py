"""
Printable export of the render forest as PDF or image.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from config import EXPORTS_DIR
from models import ExportOptions, LayoutOptions, TreeNode
from services.layout_service import layout_forest

logger = logging.getLogger(__name__)

NODE_FILLS = {
    "male": ((0.816, 0.91, 1), "#d0e8ff"),
    "female": ((1, 0.816, 0.91), "#ffd0e8"),
}
DEFAULT_FILL = ((0.91, 0.91, 0.91), "#e8e8e8")


def export_tree(forest: List[TreeNode], options: ExportOptions,
                layout: Optional[LayoutOptions] = None) -> str:
    """
    Export the render forest as an image or PDF.
    Returns the path to the generated file.
    """
    EXPORTS_DIR.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    placed, edges = layout_forest(forest, layout or LayoutOptions())

    if options.format == "pdf":
        return export_pdf(placed, edges, options, timestamp)
    return export_image(placed, edges, options, timestamp)


def _bounds(placed: List[Dict[str, Any]]) -> Tuple[float, float, float, float]:
    min_x = min(p["x"] for p in placed)
    max_x = max(p["x"] for p in placed)
    min_y = min(p["y"] for p in placed)
    max_y = max(p["y"] for p in placed)
    return min_x, max_x, min_y, max_y


def _scale(placed, width: float, height: float, margin: float = 50) -> float:
    min_x, max_x, min_y, max_y = _bounds(placed)
    tree_width = max_x - min_x + 200
    tree_height = max_y - min_y + 200
    scale_x = (width - 2 * margin) / tree_width if tree_width > 0 else 1
    scale_y = (height - 2 * margin) / tree_height if tree_height > 0 else 1
    return min(scale_x, scale_y, 1)


def _caption(member) -> str:
    return f"b. {member.dob}" if member.dob else ""


def export_pdf(placed, edges, options: ExportOptions, timestamp: str) -> str:
    """Export tree as PDF."""
    from reportlab.lib.pagesizes import A4, A3, A2, A1, A0, LETTER, LEGAL, TABLOID, landscape, portrait
    from reportlab.pdfgen import canvas

    page_sizes = {
        "A4": A4,
        "A3": A3,
        "A2": A2,
        "A1": A1,
        "A0": A0,
        "Letter": LETTER,
        "Legal": LEGAL,
        "Tabloid": TABLOID,
    }

    page_size = page_sizes.get(options.page_size, A4)
    if options.orientation == "landscape":
        page_size = landscape(page_size)
    else:
        page_size = portrait(page_size)

    filepath = EXPORTS_DIR / f"family_tree_{timestamp}.pdf"

    c = canvas.Canvas(str(filepath), pagesize=page_size)
    width, height = page_size

    if not placed:
        c.drawString(50, height - 50, "Empty Family Tree")
        c.save()
        return str(filepath)

    margin = 50
    min_x, _, min_y, _ = _bounds(placed)
    scale = _scale(placed, width, height, margin)

    def transform_x(x):
        return margin + (x - min_x + 100) * scale

    def transform_y(y):
        return height - margin - (y - min_y + 100) * scale

    # Parent-child connectors first so nodes are drawn over them
    c.setStrokeColorRGB(0.3, 0.3, 0.3)
    c.setLineWidth(1)
    for parent_index, child_index in edges:
        parent, child = placed[parent_index], placed[child_index]
        px, py = transform_x(parent["x"]), transform_y(parent["y"])
        cx, cy = transform_x(child["x"]), transform_y(child["y"])
        mid_y = (py + cy) / 2

        p = c.beginPath()
        p.moveTo(px, py)
        p.curveTo(px, mid_y, cx, mid_y, cx, cy)
        c.drawPath(p, stroke=1, fill=0)

    node_width = 80 * scale
    node_height = 50 * scale
    corner_radius = 5 * scale

    for item in placed:
        member = item["member"]
        x, y = transform_x(item["x"]), transform_y(item["y"])

        fill_color, _ = NODE_FILLS.get(member.gender, DEFAULT_FILL)
        c.setFillColorRGB(*fill_color)
        c.setStrokeColorRGB(0, 0, 0)
        if item["repeated"]:
            c.setDash(2, 2)
        c.roundRect(x - node_width / 2, y - node_height / 2, node_width, node_height,
                    corner_radius, stroke=1, fill=1)
        c.setDash()

        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica-Bold", 8 * scale)
        name_parts = member.name.split()
        if len(name_parts) > 2:
            c.drawCentredString(x, y + 4, " ".join(name_parts[:2]))
            c.drawCentredString(x, y - 8, " ".join(name_parts[2:]))
        else:
            c.drawCentredString(x, y, member.name)

        caption = _caption(member)
        if caption:
            c.setFont("Helvetica", 6 * scale)
            c.drawCentredString(x, y - node_height / 2 - 10, caption)

    c.save()
    logger.info("Exported PDF: %s", filepath)
    return str(filepath)


def export_image(placed, edges, options: ExportOptions, timestamp: str) -> str:
    """Export tree as PNG or JPG image."""
    from PIL import Image, ImageDraw, ImageFont

    width = options.width
    height = options.height

    img = Image.new("RGB", (width, height), "white")
    draw = ImageDraw.Draw(img)

    if not placed:
        draw.text((50, 50), "Empty Family Tree", fill="black")
    else:
        margin = 50
        min_x, _, min_y, _ = _bounds(placed)
        scale = _scale(placed, width, height, margin)

        def transform_x(x):
            return margin + (x - min_x + 100) * scale

        def transform_y(y):
            return margin + (y - min_y + 100) * scale

        def draw_bezier(p0, p1, p2, p3, steps=20, fill="gray", width=1):
            points = []
            for i in range(steps + 1):
                t = i / steps
                x = (1-t)**3 * p0[0] + 3*(1-t)**2 * t * p1[0] + 3*(1-t) * t**2 * p2[0] + t**3 * p3[0]
                y = (1-t)**3 * p0[1] + 3*(1-t)**2 * t * p1[1] + 3*(1-t) * t**2 * p2[1] + t**3 * p3[1]
                points.append((x, y))
            draw.line(points, fill=fill, width=width)

        for parent_index, child_index in edges:
            parent, child = placed[parent_index], placed[child_index]
            px, py = transform_x(parent["x"]), transform_y(parent["y"])
            cx, cy = transform_x(child["x"]), transform_y(child["y"])
            mid_y = (py + cy) / 2
            draw_bezier((px, py), (px, mid_y), (cx, mid_y), (cx, cy))

        node_width = 80 * scale
        node_height = 50 * scale

        try:
            font = ImageFont.truetype("/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf", max(1, int(10 * scale)))
            small_font = ImageFont.truetype("/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf", max(1, int(8 * scale)))
        except OSError:
            font = ImageFont.load_default()
            small_font = font

        for item in placed:
            member = item["member"]
            x, y = int(transform_x(item["x"])), int(transform_y(item["y"]))
            _, pil_fill = NODE_FILLS.get(member.gender, DEFAULT_FILL)
            outline = "gray" if item["repeated"] else "black"

            x0, y0 = x - node_width / 2, y - node_height / 2
            x1, y1 = x + node_width / 2, y + node_height / 2
            draw.rounded_rectangle([x0, y0, x1, y1], radius=5, fill=pil_fill, outline=outline, width=1)

            bbox = draw.textbbox((0, 0), member.name, font=font)
            text_width = bbox[2] - bbox[0]
            draw.text((x - text_width // 2, y - 6), member.name, fill="black", font=font)

            caption = _caption(member)
            if caption:
                bbox = draw.textbbox((0, 0), caption, font=small_font)
                text_width = bbox[2] - bbox[0]
                draw.text((x - text_width // 2, y + node_height / 2 + 5), caption, fill="gray", font=small_font)

    ext = options.format if options.format in ["png", "jpg", "jpeg"] else "png"
    filepath = EXPORTS_DIR / f"family_tree_{timestamp}.{ext}"

    if ext in ["jpg", "jpeg"]:
        img.save(str(filepath), "JPEG", quality=options.quality)
    else:
        img.save(str(filepath), "PNG")

    logger.info("Exported image: %s", filepath)
    return str(filepath)
