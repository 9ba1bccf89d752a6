"""
Authentication views.

Handles user registration, JWT token generation, password management
and the e-mail and phone confirmation flows.
"""
import logging
import secrets
from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework_simplejwt.views import TokenObtainPairView
from django.conf import settings
from django.contrib.auth import get_user_model
from django.contrib.auth.tokens import default_token_generator
from django.core.cache import cache
from django.utils.http import urlsafe_base64_encode, urlsafe_base64_decode
from django.utils.encoding import force_bytes, force_str
from django.utils.translation import gettext_lazy as _

from notifications.services import notify, email as email_service, whatsapp
from ..serializers import (
    UserRegistrationSerializer,
    CustomTokenObtainPairSerializer,
    ChangePasswordSerializer,
    PasswordResetRequestSerializer,
    PasswordResetConfirmSerializer,
    EmailVerifySerializer,
    PhoneCodeRequestSerializer,
    PhoneVerifySerializer,
)
from ..throttles import VerificationThrottle
from ..tokens import email_verification_token

User = get_user_model()
logger = logging.getLogger(__name__)

RESET_REQUESTED_MESSAGE = _("Se o e-mail existir, você receberá instruções para redefinir sua senha.")


def send_verification_link(user):
    token = email_verification_token.make_token(user)
    uid = urlsafe_base64_encode(force_bytes(user.pk))
    link = f"{settings.BASE_URL}/verificar-email?uid={uid}&token={token}"
    return email_service.send_email_verification_email(user, link)


def phone_code_key(user):
    return f"phone-verification:{user.pk}"


class RegisterView(generics.CreateAPIView):
    """
    POST /api/auth/register/

    Public endpoint for user registration.
    Creates a new CLIENT or SERVICE_PROVIDER account; ADMIN cannot self-register.
    """
    queryset = User.objects.all()
    permission_classes = [permissions.AllowAny]
    serializer_class = UserRegistrationSerializer

    def perform_create(self, serializer):
        user = serializer.save()
        logger.info(f"User {user.email} registered as {user.role}")
        notify(user, 'welcome', channels=('in_app', 'email'))
        send_verification_link(user)


class CustomTokenObtainPairView(TokenObtainPairView):
    """
    POST /api/auth/login/

    Public endpoint for obtaining JWT access/refresh tokens.
    Inactive accounts are refused.
    """
    serializer_class = CustomTokenObtainPairSerializer


class ChangePasswordView(generics.GenericAPIView):
    """
    POST /api/auth/change-password/

    Requires the current password.
    """
    serializer_class = ChangePasswordSerializer
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        logger.info(f"Password changed for {request.user.email}")

        return Response({
            "detail": _("Senha atualizada com sucesso.")
        }, status=status.HTTP_200_OK)


class PasswordResetRequestView(generics.GenericAPIView):
    """
    POST /api/auth/password-reset/

    Emails a reset link carrying uid and token.
    The response is the same whether or not the e-mail exists.
    """
    serializer_class = PasswordResetRequestSerializer
    permission_classes = [permissions.AllowAny]

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        email = serializer.validated_data['email'].lower()

        try:
            user = User.objects.get(email=email, is_active=True)
        except User.DoesNotExist:
            logger.info(f"Password reset requested for unknown e-mail {email}")
            return Response({"detail": RESET_REQUESTED_MESSAGE}, status=status.HTTP_200_OK)

        token = default_token_generator.make_token(user)
        uid = urlsafe_base64_encode(force_bytes(user.pk))
        link = f"{settings.BASE_URL}/redefinir-senha?uid={uid}&token={token}"
        email_service.send_password_reset_email(user, link)

        return Response({"detail": RESET_REQUESTED_MESSAGE}, status=status.HTTP_200_OK)


class PasswordResetConfirmView(generics.GenericAPIView):
    """
    POST /api/auth/password-reset-confirm/

    Body: uid, token, new_password.
    """
    serializer_class = PasswordResetConfirmSerializer
    permission_classes = [permissions.AllowAny]

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            user_id = force_str(urlsafe_base64_decode(serializer.validated_data['uid']))
            user = User.objects.get(pk=user_id, is_active=True)
        except (TypeError, ValueError, OverflowError, User.DoesNotExist):
            user = None

        if user is None or not default_token_generator.check_token(user, serializer.validated_data['token']):
            return Response({
                "detail": _("Token inválido ou expirado.")
            }, status=status.HTTP_400_BAD_REQUEST)

        user.set_password(serializer.validated_data['new_password'])
        user.save(update_fields=['password'])
        logger.info(f"Password reset completed for {user.email}")

        return Response({
            "detail": _("Senha redefinida com sucesso.")
        }, status=status.HTTP_200_OK)


class EmailVerifyView(generics.GenericAPIView):
    """
    POST /api/auth/email/verify/

    Body: uid, token (from the confirmation link).
    Confirming an already confirmed address is a no-op.
    """
    serializer_class = EmailVerifySerializer
    permission_classes = [permissions.AllowAny]

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            user_id = force_str(urlsafe_base64_decode(serializer.validated_data['uid']))
            user = User.objects.get(pk=user_id, is_active=True)
        except (TypeError, ValueError, OverflowError, User.DoesNotExist):
            user = None

        if user is not None and user.email_verified:
            return Response({"detail": _("E-mail já confirmado.")}, status=status.HTTP_200_OK)

        if user is None or not email_verification_token.check_token(user, serializer.validated_data['token']):
            return Response({
                "detail": _("Link inválido ou expirado.")
            }, status=status.HTTP_400_BAD_REQUEST)

        user.email_verified = True
        user.save(update_fields=['email_verified'])
        logger.info(f"E-mail confirmed for {user.email}")

        return Response({"detail": _("E-mail confirmado com sucesso.")}, status=status.HTTP_200_OK)


class EmailVerificationResendView(generics.GenericAPIView):
    """
    POST /api/auth/email/resend/

    Sends a new confirmation link to the authenticated user.
    """
    permission_classes = [permissions.IsAuthenticated]
    throttle_classes = [VerificationThrottle]

    def post(self, request, *args, **kwargs):
        user = request.user
        if user.email_verified:
            return Response({"detail": _("E-mail já confirmado.")}, status=status.HTTP_400_BAD_REQUEST)

        if not send_verification_link(user):
            return Response({
                "detail": _("Não foi possível enviar o e-mail. Tente novamente mais tarde.")
            }, status=status.HTTP_503_SERVICE_UNAVAILABLE)

        return Response({"detail": _("Enviamos um novo link de confirmação.")}, status=status.HTTP_200_OK)


class PhoneCodeRequestView(generics.GenericAPIView):
    """
    POST /api/auth/phone/send-code/

    Body: phone (optional, defaults to the profile phone).
    Sends a six digit code over WhatsApp, valid for ``PHONE_VERIFICATION_TTL`` seconds.
    """
    serializer_class = PhoneCodeRequestSerializer
    permission_classes = [permissions.IsAuthenticated]
    throttle_classes = [VerificationThrottle]

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        phone = serializer.validated_data.get('phone') or request.user.phone
        if not phone:
            return Response({"phone": [_("Informe um telefone.")]}, status=status.HTTP_400_BAD_REQUEST)

        code = f"{secrets.randbelow(900000) + 100000}"
        message = (
            f"Seu código de verificação MyServ é {code}. "
            f"Ele expira em {settings.PHONE_VERIFICATION_TTL // 60} minutos."
        )
        if not whatsapp.send_whatsapp(phone, message):
            return Response({
                "detail": _("Não foi possível enviar o código. Tente novamente mais tarde.")
            }, status=status.HTTP_503_SERVICE_UNAVAILABLE)

        cache.set(phone_code_key(request.user), {'code': code, 'phone': phone}, settings.PHONE_VERIFICATION_TTL)
        logger.info(f"Phone confirmation code sent to user {request.user.id}")

        return Response({"detail": _("Código enviado por WhatsApp.")}, status=status.HTTP_200_OK)


class PhoneVerifyView(generics.GenericAPIView):
    """
    POST /api/auth/phone/verify/

    Body: code. Confirms the phone the code was sent to.
    """
    serializer_class = PhoneVerifySerializer
    permission_classes = [permissions.IsAuthenticated]
    throttle_classes = [VerificationThrottle]

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        pending = cache.get(phone_code_key(request.user))
        if pending is None:
            return Response({
                "detail": _("Nenhum código solicitado ou código expirado.")
            }, status=status.HTTP_400_BAD_REQUEST)

        if not secrets.compare_digest(pending['code'], serializer.validated_data['code']):
            return Response({"detail": _("Código incorreto.")}, status=status.HTTP_400_BAD_REQUEST)

        user = request.user
        user.phone = pending['phone']
        user.phone_verified = True
        user.save(update_fields=['phone', 'phone_verified'])
        cache.delete(phone_code_key(user))
        logger.info(f"Phone confirmed for user {user.id}")

        return Response({"detail": _("Telefone confirmado com sucesso.")}, status=status.HTTP_200_OK)
