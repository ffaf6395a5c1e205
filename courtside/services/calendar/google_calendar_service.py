# courtside/services/calendar/google_calendar_service.py
from datetime import timedelta, datetime, timezone
from typing import Dict

from courtside.config.settings import get_settings
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from sqlalchemy.orm import Session
import logging

from courtside.models.user import User
from courtside.utils.encryption import decrypt_token, encrypt_token
from courtside.utils.time_utils import as_utc

settings = get_settings()

logger = logging.getLogger(__name__)


class CalendarNotLinkedError(Exception):
    """User has no stored Google tokens"""


class GoogleCalendarService:
    SCOPES = ['https://www.googleapis.com/auth/calendar.events']

    def __init__(self):
        self.client_config = {
            "client_id": settings.GOOGLE_CLIENT_ID,
            "client_secret": settings.GOOGLE_CLIENT_SECRET,
            "token_uri": settings.GOOGLE_TOKEN_URI,
        }
        self.calendar_id = settings.GOOGLE_CALENDAR_ID

    def get_valid_credentials(self, user: User, db: Session) -> Credentials:
        """Get valid credentials for the user, refreshing if necessary"""
        if not user.has_calendar_link:
            raise CalendarNotLinkedError(f"User {user.id} has no calendar tokens")

        now = datetime.now(timezone.utc)
        expires_at = user.google_token_expires_at
        if expires_at is None or as_utc(expires_at) <= now + timedelta(minutes=5):
            return self.refresh_access_token(user, db)

        return Credentials(
            token=decrypt_token(user.google_access_token_encrypted),
            refresh_token=decrypt_token(user.google_refresh_token_encrypted),
            token_uri=self.client_config['token_uri'],
            client_id=self.client_config['client_id'],
            client_secret=self.client_config['client_secret'],
            scopes=self.SCOPES,
        )

    def refresh_access_token(self, user: User, db: Session) -> Credentials:
        """Refresh expired access token using refresh token"""
        credentials = Credentials(
            token=None,
            refresh_token=decrypt_token(user.google_refresh_token_encrypted),
            token_uri=self.client_config['token_uri'],
            client_id=self.client_config['client_id'],
            client_secret=self.client_config['client_secret'],
            scopes=self.SCOPES,
        )
        credentials.refresh(Request())

        user.google_access_token_encrypted = encrypt_token(credentials.token)
        # google-auth reports expiry as naive UTC
        user.google_token_expires_at = (
            credentials.expiry.replace(tzinfo=timezone.utc) if credentials.expiry else None
        )
        db.commit()

        logger.info(f"Refreshed Google access token for user {user.id}")
        return credentials

    def _events(self, user: User, db: Session):
        credentials = self.get_valid_credentials(user, db)
        service = build('calendar', 'v3', credentials=credentials, cache_discovery=False)
        return service.events()

    def create_event(self, user: User, db: Session, event_data: Dict) -> Dict:
        """
        Insert an event into the user's calendar.

        event_data keys: summary, description, location, start, end (datetimes).
        Returns {'event_id': ..., 'event_url': ...}.
        """
        body = {
            'summary': event_data['summary'],
            'description': event_data.get('description', ''),
            'location': event_data.get('location', ''),
            'start': {'dateTime': as_utc(event_data['start']).isoformat(), 'timeZone': 'UTC'},
            'end': {'dateTime': as_utc(event_data['end']).isoformat(), 'timeZone': 'UTC'},
            'reminders': {'useDefault': True},
        }

        created = self._events(user, db).insert(calendarId=self.calendar_id, body=body).execute()

        logger.info(f"Created Google Calendar event {created.get('id')} for user {user.id}")
        return {'event_id': created['id'], 'event_url': created.get('htmlLink')}

    def delete_event(self, user: User, db: Session, event_id: str) -> bool:
        """Delete an event from the user's calendar"""
        self._events(user, db).delete(calendarId=self.calendar_id, eventId=event_id).execute()
        logger.info(f"Deleted Google Calendar event {event_id} for user {user.id}")
        return True
