"""
erp_core — AITM ERP student CLI
===============================
Architecture: single-threaded interactive loop over a JSON HTTP backend.

  constants.py     → Version, endpoints, timeouts, palette, menu
  config.py        → Paths, logging, env toggles, safe_print
  http_client.py   → Pooled HTTP session + CA bundle
  errors.py        → TransportError / BackendError
  models.py        → Pydantic models for the backend's JSON
  api.py           → ErpClient (one method per endpoint)
  session_store.py → Saved session load/save/clear
  captcha.py       → CAPTCHA decode + inline / file renderers
  auth.py          → CAPTCHA login loop + session bootstrap
  attendance.py    → Bunk calculator + concurrent attendance fetch
  palette.py       → rich Theme + Console factory
  banner.py        → Banner, help screen, goodbye
  tables.py        → rich renderables for every view
  app.py           → ErpApp (menu/dispatch loop)
  runner.py        → main() + typer CLI
"""
