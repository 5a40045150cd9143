"""
Interactive remediation sessions for NVCheckup.

Modules:
  runner.py — fix session (list / preview / confirm / apply) and
              undo session (list journal / confirm / undo).
"""
