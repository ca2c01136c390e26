"""Upstream proxy adapters (Kakao Local, TourAPI, Gemini)."""
