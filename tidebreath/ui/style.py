import sys

if sys.platform == "darwin":
    FONT_STACK = 'Helvetica Neue","Arial'
elif sys.platform.startswith("win"):
    FONT_STACK = 'Segoe UI","Arial'
else:
    FONT_STACK = 'DejaVu Sans","Arial'

# phase / theme accents
THEME_ACCENTS = {
    "warm": "#f59e0b",
    "neutral": "#a5b4fc",
    "cool": "#38bdf8",
}

APP_QSS = f"""
QMainWindow, QWidget {{
    background: #0a0d12;
    color: #e7eef7;
    font-family: "{FONT_STACK}";
    font-size: 14px;
}}

QLabel {{
    color: #e7eef7;
}}

QLabel#muted {{
    color: rgba(231,238,247,0.65);
}}

QPushButton {{
    background: #1c2330;
    border: 1px solid rgba(255,255,255,0.10);
    padding: 10px 14px;
    border-radius: 12px;
    font-weight: 600;
}}
QPushButton:hover {{ background: #243042; }}
QPushButton:pressed {{ background: #18202c; }}
QPushButton:disabled {{
    color: rgba(231,238,247,0.35);
    background: rgba(255,255,255,0.03);
}}

QProgressBar {{
    border: 1px solid rgba(255,255,255,0.10);
    border-radius: 10px;
    background: rgba(255,255,255,0.06);
    text-align: center;
    height: 20px;
}}
QProgressBar::chunk {{
    border-radius: 10px;
}}
"""


def card_qss(radius: int = 16, alpha: float = 0.05) -> str:
    return f"""
        QFrame {{
            background: rgba(255,255,255,{alpha});
            border: 1px solid rgba(255,255,255,0.08);
            border-radius: {radius}px;
        }}
    """


def fmt_duration(seconds: float) -> str:
    seconds = max(0, int(seconds))
    m = seconds // 60
    s = seconds % 60
    if m >= 60:
        h = m // 60
        m = m % 60
        return f"{h}h {m:02d}m"
    return f"{m:02d}:{s:02d}"


def phase_label(phase: str) -> str:
    if phase in ("hold_in", "hold_out"):
        return "Hold"
    return {"inhale": "Breathe in", "exhale": "Breathe out"}.get(phase, phase)
