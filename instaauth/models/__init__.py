from .profile import Profile, ProfileName

__all__ = ["Profile", "ProfileName"]
