# =============================================================================
# agent/__init__.py
# =============================================================================
# The Google ADK agent that answers sales questions.
#
# ARCHITECTURAL ROLE:
#   agent/ decides WHICH tool to call and HOW to explain the result.
#   It never talks to Odoo directly; tools/ and core/ do that.
# =============================================================================
