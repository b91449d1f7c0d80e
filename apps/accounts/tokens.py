from rest_framework_simplejwt.tokens import AccessToken


def issue_token(user):
    """Signed bearer token carrying {id, email, role}."""
    token = AccessToken.for_user(user)
    token['email'] = user.email
    token['role'] = user.role
    return str(token)
