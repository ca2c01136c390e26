"""ildanga — 국내 여행 계획 도우미."""

__version__ = "0.3.0"
