"""Version 1 of the Meetup API."""
