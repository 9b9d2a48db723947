"""
Helpline — Help-Channel Tracking & Attribution for Discord
===========================================================
Tracks questions asked in a community's help channels, records which
answer resolved each one, and surfaces staff-vs-community attribution,
contributor leaderboards, and question trends through a dashboard API.

Package layout::

    helpline/
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Category names, leaderboard size, avatar helper
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + async helper
    │   ├── models.py      # users, questions, answers
    │   └── seed.py        # Demo question seeder
    ├── engine/
    │   ├── records.py     # QuestionRecord / AnswerRecord value objects
    │   ├── dates.py       # Calendar stepping (round_up / advance)
    │   ├── buckets.py     # Time bucket generation
    │   ├── categories.py  # Category partition + time bucketing
    │   ├── contributors.py # Answerer grouping + leaderboard ranking
    │   └── filters.py     # Channel/date filter pipeline
    ├── services/
    │   ├── question_service.py    # Question persistence
    │   ├── github_service.py      # GitHub REST client
    │   ├── identity_service.py    # Discord member / staff resolution
    │   ├── contributor_service.py # Async contributor resolution
    │   └── dashboard_service.py   # Dashboard snapshot assembly
    ├── bot/
    │   ├── core.py        # Bot subclass, cog loader
    │   └── cogs/
    │       └── questions.py  # Thread tracking, Mark as Answer, /top-helpers
    └── api/
        ├── main.py        # FastAPI app
        └── routes/        # Dashboard endpoints
"""

__version__ = "0.1.0"
