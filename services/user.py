"""
User profile service for the single local user.
"""

import logging

from config import get_settings
from models import UserPreferences
from repositories import UserPreferencesRepository
from services.validation import UserProfileForm

logger = logging.getLogger(__name__)


class UserService:
    """Profile and base currency of the local user."""

    @staticmethod
    def get_current_user() -> UserPreferences:
        """
        Return the user's preferences, creating them from settings on first use.
        """
        prefs = UserPreferencesRepository.get()
        if prefs:
            return prefs

        settings = get_settings()
        logger.info(f"No user profile found, creating default for {settings.default_user_email}")
        return UserPreferencesRepository.save_profile(
            name=settings.default_user_name,
            email=settings.default_user_email,
            default_currency=settings.default_currency,
        )

    @staticmethod
    def update_profile(form: UserProfileForm) -> UserPreferences:
        """Save name, email and base currency."""
        prefs = UserPreferencesRepository.save_profile(
            name=form.name,
            email=form.email,
            default_currency=form.default_currency,
        )
        logger.info(f"Updated profile for {prefs.email_address} (base currency {prefs.default_currency})")
        return prefs
