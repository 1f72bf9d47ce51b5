"""
Constants: version, backend endpoints, timeouts, palette colors, menu.
"""

ERP_VERSION = "1.2.0"

# ─── Backend ─────────────────────────────────────────────────────
DEFAULT_BASE_URL = "https://erptestbackend-production.up.railway.app"

API_TIMEOUT_GET = 30           # Seconds, health check only
API_TIMEOUT_POST = 120         # CAPTCHA solving / attendance crunching is slow server-side

HEALTH_ENDPOINT = "/health"

# ─── Login ───────────────────────────────────────────────────────
CAPTCHA_FILENAME = "captcha.png"
CAPTCHA_INLINE_WIDTH = 80      # Max terminal columns used for the inline CAPTCHA

# ─── Attendance ──────────────────────────────────────────────────
DEFAULT_TARGET_PERCENT = 75
WARN_PERCENT = 50              # Below this the percentage turns red

# ─── Palette (hex, matching the ERP web theme) ───────────────────
PALETTE = {
    "muted":         "#8B7F77",
    "error":         "#E23D2D",
    "warn":          "#FFB020",
    "success":       "#2FBF71",
    "info":          "#FF8A5B",
    "accent.dim":    "#D14A22",
    "accent.bright": "#FF7A3D",
    "accent":        "#FF5A2D",
}

# ─── Menu ────────────────────────────────────────────────────────
# (key, label, description). Order is the order shown.
MENU_OPTIONS = [
    ("profile",    "Profile",                "View your student profile"),
    ("dashboard",  "Dashboard",              "Program, branch, section and semester"),
    ("attendance", "Attendance",             "Overall and subject-wise attendance"),
    ("subjects",   "Subjects",               "List all subjects"),
    ("subject",    "Subject Attendance",     "Attendance for a single subject"),
    ("timetable",  "Timetable",              "Weekly timetable"),
    ("today",      "Today's Schedule",       "Today's classes and attendance"),
    ("bunk",       "Bunk Calculator",        "See how many classes you can bunk"),
    ("lastvisit",  "Last Visit",             "Last login info"),
    ("help",       "Help",                   "Show this menu with descriptions"),
    ("logout",     "Logout",                 "Clear session and exit"),
    ("exit",       "Exit",                   "Quit and keep the session saved"),
]
