"""
Authentication endpoints (JSON)
"""
from django.views.decorators.csrf import csrf_exempt

from . import accounts
from .serializers import parse_json_body
from .views import json_response, require_method


@csrf_exempt
def signup(request):
    require_method(request, "POST")
    return json_response(accounts.signup(parse_json_body(request.body)))


@csrf_exempt
def login_view(request):
    require_method(request, "POST")
    return json_response(accounts.sign_in(request, parse_json_body(request.body)))


@csrf_exempt
def logout_view(request):
    require_method(request, "POST")
    return json_response(accounts.sign_out(request))


@csrf_exempt
def password_reset(request):
    require_method(request, "POST")
    return json_response(accounts.send_password_reset(parse_json_body(request.body)))


@csrf_exempt
def password_reset_confirm(request):
    require_method(request, "POST")
    return json_response(accounts.confirm_password_reset(parse_json_body(request.body)))


def session_view(request):
    require_method(request, "GET")
    return json_response(accounts.session(request))
