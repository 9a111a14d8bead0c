from django.contrib.auth.backends import ModelBackend
from django.contrib.auth import get_user_model
from django.db.models import Q

UserModel = get_user_model()


class CaseInsensitiveAuthBackend(ModelBackend):
    """
    Authenticates with the e-mail address (any letter case) or the mobile number.
    """

    def authenticate(self, request, username=None, password=None, **kwargs):
        if username is None:
            username = kwargs.get(UserModel.USERNAME_FIELD)
        if not username or password is None:
            return None

        identifier = username.strip()
        matches = UserModel.objects.filter(Q(email__iexact=identifier) | Q(phone=identifier))
        user = matches.first()
        if user is None or matches.count() > 1:
            # Run the hasher anyway to keep timing uniform
            UserModel().set_password(password)
            return None

        if user.check_password(password) and self.user_can_authenticate(user):
            return user
        return None
