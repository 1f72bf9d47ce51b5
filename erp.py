"""
AITM ERP — Student CLI
======================
Log in to the college ERP with roll number, password and CAPTCHA, then
browse profile, attendance, subjects and timetable from the terminal.
The session is kept in ~/.aitm-erp/session.json until you log out.

Usage:
    python erp.py [--no-color] [-V]
"""

from erp_core.runner import cli

if __name__ == "__main__":
    cli()
