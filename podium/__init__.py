"""
Podium — Team Achievement Tracking for Athletes and Coaches
=============================================================
Coaches create teams and assign point-valued tasks.  Athletes submit
proof or log progress, and a leaderboard plus a derived badge ladder
ranks participation across the team.

Package layout::

    podium/
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Badge glyphs, rank medals, point bounds
    ├── errors.py          # PodiumError hierarchy
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + async helper
    │   └── models.py      # All ORM models
    ├── engine/
    │   ├── team_code.py   # Join-code encoding + lookup
    │   ├── leaderboard.py # Points aggregation + ranking
    │   ├── badges.py      # Badge ladder evaluation + memo cache
    │   ├── progress.py    # Cumulative progress accumulation
    │   └── validation.py  # Form-level validation rules
    ├── services/
    │   ├── session_store.py       # Auth session store (observer)
    │   ├── auth_service.py        # Sign-up / sign-in / sign-out
    │   ├── team_service.py        # Teams + membership
    │   ├── task_service.py        # Tasks + soft delete
    │   └── achievement_service.py # Proof, progress, leaderboard, badges
    └── api/
        ├── main.py        # FastAPI app
        ├── auth.py        # Email/password → JWT
        └── routes/        # Team, task and achievement endpoints
"""

__version__ = "0.1.0"
