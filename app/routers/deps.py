# app/routers/deps.py
"""Service instances shared by the routers and live feeds."""
from app.repositories.pitch_repo import PitchRepository
from app.repositories.request_repo import RequestRepository
from app.repositories.user_repo import UserRepository
from app.services.pitch_service import PitchService
from app.services.request_service import RequestService

request_repo = RequestRepository()
pitch_repo = PitchRepository()
user_repo = UserRepository()

request_service = RequestService(request_repo, pitch_repo, user_repo)
pitch_service = PitchService(pitch_repo, request_repo, user_repo)
