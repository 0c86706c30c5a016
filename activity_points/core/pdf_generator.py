"""Points statement PDF generator.

One page per student with:
- Small-caps institution title and program line
- Colored filled oval with the student's total vs. required points
- Category table (earned vs. minimum) with progress bars
- Approved activity listing with points
- Generated-on footer

Text is set in the base-14 Helvetica fonts, which only cover Latin-1.
Names outside that range (Devanagari, CJK, ...) are drawn with "?" in place
of the missing characters; the CSV and text report keep them intact.
"""

import datetime
import fitz  # PyMuPDF

from .catalog import Catalog
from .models import STATUS_APPROVED, ProgramRequirement, Submission
from .progress import evaluate_progress, student_ids, summarize_student

# --- Page layout constants (letter: 612 x 792 pt) ---
PAGE_W = 612
PAGE_H = 792
LEFT_MARGIN = 54
RIGHT_MARGIN = PAGE_W - 54

# Table columns (x positions)
COL_CATEGORY = LEFT_MARGIN
COL_EARNED = 330
COL_MINIMUM = 390
COL_BAR = 450
BAR_W = RIGHT_MARGIN - COL_BAR

# Colors
BLUE = (0.15, 0.3, 0.7)
GREEN = (0.1, 0.6, 0.25)
AMBER = (0.9, 0.6, 0.1)
LIGHT_GRAY = (0.85, 0.85, 0.85)
GRAY = (0.4, 0.4, 0.4)
WHITE = (1, 1, 1)
BLACK = (0, 0, 0)

# Layout Y positions
TITLE_LINE1_Y = 48
TITLE_LINE2_Y = 72
STUDENT_Y = 104
OVAL_CENTER_Y = 138
TABLE_TOP_Y = 184
FOOTER_Y = PAGE_H - 24
ACTIVITIES_BOTTOM_Y = PAGE_H - 48

# Font sizes
TITLE1_LARGE = 16
TITLE1_SMALL = 12
TITLE2_SIZE = 12
STUDENT_SIZE = 11
HEADER_SIZE = 9
ROW_SIZE = 10
ACTIVITY_SIZE = 9
FOOTER_SIZE = 7
OVAL_LABEL_SIZE = 12

ROW_HEIGHT = 20
ACTIVITY_LINE_HEIGHT = 13

FONT_REGULAR = 'Helvetica'
FONT_BOLD = 'Helvetica-Bold'
MISSING_GLYPH = '?'


def generate_statement_pdf(submissions: list[Submission], catalog: Catalog,
                           requirement: ProgramRequirement, output_path: str,
                           institution: str = '', year: str = ''):
    """Generate a points statement PDF, one page per student.

    Args:
        submissions: Scored submissions (any status; only approved ones count).
        catalog: Catalog used to resolve category and level names.
        requirement: Program requirements the totals are measured against.
        output_path: Where to save the PDF.
        institution: Institution name for the title line.
        year: Academic year shown under the title.
    """
    students = student_ids(submissions)
    doc = fitz.open()

    if not students:
        doc.new_page(width=PAGE_W, height=PAGE_H)
        doc.save(output_path)
        doc.close()
        return

    generated = datetime.date.today().isoformat()
    for student_id in students:
        summary = summarize_student(submissions, student_id)
        progress = evaluate_progress(summary, requirement)
        approved = [s for s in submissions
                    if s.student_id == student_id and s.status == STATUS_APPROVED]

        page = doc.new_page(width=PAGE_W, height=PAGE_H)
        _draw_small_caps(page, PAGE_W / 2, TITLE_LINE1_Y,
                         pdf_text(institution) or 'Activity Points Statement',
                         TITLE1_LARGE, TITLE1_SMALL)
        subtitle = f"{requirement.program} MAP Points"
        if year:
            subtitle = f"{subtitle} {year}"
        _draw_centered(page, TITLE_LINE2_Y, subtitle, FONT_REGULAR, TITLE2_SIZE, GRAY)

        name = pdf_text(summary['student_name']) or student_id
        _draw_centered(page, STUDENT_Y, f"{name}  |  {student_id}",
                       FONT_BOLD, STUDENT_SIZE, BLACK)

        _draw_oval(page, f"{progress['total_points']} / {progress['total_required']} POINTS",
                   OVAL_CENTER_Y, GREEN if progress['complete'] else BLUE)

        y = _draw_category_table(page, TABLE_TOP_Y, progress, catalog)
        _draw_activities(page, y + 24, approved, catalog)
        _draw_footer(page, generated, catalog.version)

    doc.save(output_path)
    doc.close()


def pdf_text(text):
    """Replace characters the base-14 fonts cannot encode."""
    return ''.join(ch if ord(ch) < 256 else MISSING_GLYPH for ch in text or '')


# --- Drawing functions ---

def _draw_category_table(page, y, progress, catalog):
    """Draw header plus one row per category. Returns the y after the table."""
    for x, text in [(COL_CATEGORY, 'CATEGORY'), (COL_EARNED, 'EARNED'),
                    (COL_MINIMUM, 'MINIMUM'), (COL_BAR, 'PROGRESS')]:
        page.insert_text(fitz.Point(x, y), text, fontname=FONT_BOLD,
                         fontsize=HEADER_SIZE, color=GRAY)
    page.draw_line(fitz.Point(LEFT_MARGIN, y + 5), fitz.Point(RIGHT_MARGIN, y + 5),
                   color=LIGHT_GRAY, width=0.75)

    for cat in progress['categories']:
        y += ROW_HEIGHT
        label = f"{cat['category_id']}  {catalog.lookup_category(cat['category_id']).name}"
        page.insert_text(fitz.Point(COL_CATEGORY, y), label,
                         fontname=FONT_REGULAR, fontsize=ROW_SIZE, color=BLACK)
        page.insert_text(fitz.Point(COL_EARNED, y), str(cat['earned']),
                         fontname=FONT_BOLD, fontsize=ROW_SIZE, color=BLACK)
        page.insert_text(fitz.Point(COL_MINIMUM, y), str(cat['minimum']),
                         fontname=FONT_REGULAR, fontsize=ROW_SIZE, color=BLACK)
        _draw_bar(page, y, cat['earned'], cat['minimum'])

    return y


def _draw_bar(page, y, earned, minimum):
    """Horizontal progress bar, full when the minimum is met."""
    ratio = 1.0 if minimum <= 0 else min(earned / minimum, 1.0)
    top = y - 8
    page.draw_rect(fitz.Rect(COL_BAR, top, COL_BAR + BAR_W, top + 8),
                   color=LIGHT_GRAY, fill=LIGHT_GRAY)
    if ratio > 0:
        page.draw_rect(fitz.Rect(COL_BAR, top, COL_BAR + BAR_W * ratio, top + 8),
                       color=GREEN if ratio >= 1.0 else AMBER,
                       fill=GREEN if ratio >= 1.0 else AMBER)


def _draw_activities(page, y, approved, catalog):
    """List approved activities until the page runs out."""
    page.insert_text(fitz.Point(LEFT_MARGIN, y), 'APPROVED ACTIVITIES',
                     fontname=FONT_BOLD, fontsize=HEADER_SIZE, color=GRAY)
    y += ACTIVITY_LINE_HEIGHT + 2

    if not approved:
        page.insert_text(fitz.Point(LEFT_MARGIN, y), 'None yet',
                         fontname=FONT_REGULAR, fontsize=ACTIVITY_SIZE, color=GRAY)
        return

    for i, sub in enumerate(approved):
        if y > ACTIVITIES_BOTTOM_Y:
            more = f'... and {len(approved) - i} more'
            page.insert_text(fitz.Point(LEFT_MARGIN, y), more,
                             fontname=FONT_REGULAR, fontsize=ACTIVITY_SIZE, color=GRAY)
            return
        detail = sub.level_id
        if sub.duration:
            detail = catalog.duration_name(sub.duration)
        line = f"{sub.category_id}  {pdf_text(sub.activity_name)} ({detail})"
        page.insert_text(fitz.Point(LEFT_MARGIN, y), line,
                         fontname=FONT_REGULAR, fontsize=ACTIVITY_SIZE, color=BLACK)
        pts = str(sub.points)
        tw = fitz.get_text_length(pts, fontname=FONT_BOLD, fontsize=ACTIVITY_SIZE)
        page.insert_text(fitz.Point(RIGHT_MARGIN - tw, y), pts,
                         fontname=FONT_BOLD, fontsize=ACTIVITY_SIZE, color=BLACK)
        y += ACTIVITY_LINE_HEIGHT


def _draw_centered(page, y, text, fontname, fontsize, color):
    tw = fitz.get_text_length(text, fontname=fontname, fontsize=fontsize)
    page.insert_text(fitz.Point(PAGE_W / 2 - tw / 2, y), text,
                     fontname=fontname, fontsize=fontsize, color=color)


def _draw_small_caps(page, center_x, y, text, large_size, small_size):
    """Draw text in small caps, centered horizontally.

    First letter of each word at large_size, rest at small_size.
    """
    total_width = _measure_small_caps_width(text, large_size, small_size)
    x = center_x - total_width / 2

    for wi, word in enumerate(text.split()):
        if wi > 0:
            x += fitz.get_text_length(' ', fontname=FONT_BOLD, fontsize=large_size)
        for ci, ch in enumerate(word):
            ch_upper = ch.upper()
            fs = large_size if ci == 0 else small_size
            page.insert_text(fitz.Point(x, y), ch_upper,
                             fontname=FONT_BOLD, fontsize=fs, color=BLACK)
            x += fitz.get_text_length(ch_upper, fontname=FONT_BOLD, fontsize=fs)


def _measure_small_caps_width(text, large_size, small_size):
    total = 0
    for wi, word in enumerate(text.split()):
        if wi > 0:
            total += fitz.get_text_length(' ', fontname=FONT_BOLD, fontsize=large_size)
        for ci, ch in enumerate(word):
            fs = large_size if ci == 0 else small_size
            total += fitz.get_text_length(ch.upper(), fontname=FONT_BOLD, fontsize=fs)
    return total


def _draw_oval(page, label, y_center, fill):
    """Draw a filled oval with white text label."""
    tw = fitz.get_text_length(label, fontname=FONT_BOLD, fontsize=OVAL_LABEL_SIZE)
    oval_w = tw + 40
    oval_h = 24

    rect = fitz.Rect(PAGE_W / 2 - oval_w / 2, y_center - oval_h / 2,
                     PAGE_W / 2 + oval_w / 2, y_center + oval_h / 2)
    page.draw_oval(rect, color=fill, fill=fill)

    page.insert_text(fitz.Point(PAGE_W / 2 - tw / 2, y_center + OVAL_LABEL_SIZE * 0.35),
                     label, fontname=FONT_BOLD, fontsize=OVAL_LABEL_SIZE, color=WHITE)


def _draw_footer(page, generated, version):
    text = f'Generated {generated}  |  catalog {version}'
    _draw_centered(page, FOOTER_Y, text, FONT_REGULAR, FOOTER_SIZE, GRAY)
