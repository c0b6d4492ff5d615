# SBRI Risk API
"""
REST API exposing UK company risk profiles.

Endpoints:
- GET /api/v1/companies/search - Company name search
- GET /api/v1/companies/{number} - Profile with latest accounts
- GET /api/v1/companies/{number}/scored - Profile plus risk score and level
- GET /api/v1/companies/{number}/filings, /director-changes, /ccjs, /insolvency
- GET /api/v1/sectors/{sic} - Sector statistics
"""
