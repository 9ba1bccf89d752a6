import re

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from .models import ServiceProvider, ModerationLog, Favorite

User = get_user_model()

ADDRESS_FIELDS = ['street', 'number', 'district', 'city', 'state', 'zip_code', 'latitude', 'longitude']


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = [
            'id', 'email', 'first_name', 'last_name', 'role', 'phone', 'cpf_cnpj',
            'profile_image', *ADDRESS_FIELDS,
            'is_approved', 'approval_status', 'email_verified', 'phone_verified',
            'terms_accepted_at', 'date_joined',
        ]
        read_only_fields = [
            'id', 'role', 'email', 'is_approved', 'approval_status',
            'email_verified', 'phone_verified', 'terms_accepted_at', 'date_joined',
        ]

    def validate_state(self, value):
        return value.upper()

    def update(self, instance, validated_data):
        # A new phone number must be confirmed again
        if 'phone' in validated_data and validated_data['phone'] != instance.phone:
            instance.phone_verified = False
        return super().update(instance, validated_data)


class UserRegistrationSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True)
    role = serializers.ChoiceField(
        choices=[User.Role.CLIENT, User.Role.SERVICE_PROVIDER],
        default=User.Role.CLIENT
    )

    class Meta:
        model = User
        fields = [
            'id', 'email', 'password', 'first_name', 'last_name', 'role',
            'phone', 'cpf_cnpj', *ADDRESS_FIELDS,
        ]
        read_only_fields = ['id']

    def validate_email(self, value):
        value = value.lower()
        if User.objects.filter(email=value).exists():
            raise serializers.ValidationError(_("Este e-mail já está cadastrado."))
        return value

    def validate(self, attrs):
        candidate = User(email=attrs.get('email'), first_name=attrs.get('first_name', ''))
        validate_password(attrs['password'], user=candidate)
        return attrs

    def create(self, validated_data):
        password = validated_data.pop('password')
        email = validated_data.pop('email')
        return User.objects.create_user(email=email, password=password, **validated_data)


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    default_error_messages = {
        'no_active_account': _("E-mail ou senha inválidos, ou conta desativada."),
    }

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['role'] = user.role
        token['email'] = user.email
        return token

    def validate(self, attrs):
        data = super().validate(attrs)
        data['user'] = UserSerializer(self.user).data
        return data


class ChangePasswordSerializer(serializers.Serializer):
    old_password = serializers.CharField(write_only=True)
    new_password = serializers.CharField(write_only=True)

    def validate_old_password(self, value):
        user = self.context['request'].user
        if not user.check_password(value):
            raise serializers.ValidationError(_("Senha atual incorreta."))
        return value

    def validate(self, attrs):
        if attrs['old_password'] == attrs['new_password']:
            raise serializers.ValidationError(
                {'new_password': _("A nova senha deve ser diferente da atual.")}
            )
        validate_password(attrs['new_password'], user=self.context['request'].user)
        return attrs

    def save(self, **kwargs):
        user = self.context['request'].user
        user.set_password(self.validated_data['new_password'])
        user.save(update_fields=['password'])
        return user


class PasswordResetRequestSerializer(serializers.Serializer):
    email = serializers.EmailField()


class PasswordResetConfirmSerializer(serializers.Serializer):
    uid = serializers.CharField()
    token = serializers.CharField()
    new_password = serializers.CharField(write_only=True)

    def validate_new_password(self, value):
        validate_password(value)
        return value


class EmailVerifySerializer(serializers.Serializer):
    uid = serializers.CharField()
    token = serializers.CharField()


class PhoneCodeRequestSerializer(serializers.Serializer):
    phone = serializers.CharField(required=False, max_length=20)

    def validate_phone(self, value):
        digits = re.sub(r"\D", "", value)
        if len(digits) not in (10, 11):
            raise serializers.ValidationError(_("Telefone inválido. Informe DDD e número."))
        return digits


class PhoneVerifySerializer(serializers.Serializer):
    code = serializers.RegexField(r"^\d{6}$", error_messages={"invalid": _("Código inválido.")})


class ServiceProviderSerializer(serializers.ModelSerializer):
    user = UserSerializer(read_only=True)
    latitude = serializers.DecimalField(
        max_digits=9, decimal_places=6, write_only=True, required=False, allow_null=True
    )
    longitude = serializers.DecimalField(
        max_digits=9, decimal_places=6, write_only=True, required=False, allow_null=True
    )

    class Meta:
        model = ServiceProvider
        fields = [
            'id',
            'user',
            'description',
            'has_scheduling',
            'has_quoting',
            'charges_travel',
            'travel_rate_per_km',
            'travel_minimum_fee',
            'travel_fixed_fee',
            'waives_travel_on_hire',
            'service_radius_km',
            'is_highlighted',
            'average_rating',
            'total_reviews',
            'latitude',
            'longitude',
        ]
        read_only_fields = ['is_highlighted', 'average_rating', 'total_reviews']

    def validate(self, attrs):
        charges = attrs.get('charges_travel', getattr(self.instance, 'charges_travel', False))
        rate = attrs.get('travel_rate_per_km', getattr(self.instance, 'travel_rate_per_km', None))
        fixed = attrs.get('travel_fixed_fee', getattr(self.instance, 'travel_fixed_fee', None))
        if charges and rate is None and fixed is None:
            raise serializers.ValidationError(
                _("Informe o valor por km ou a taxa fixa para cobrar deslocamento.")
            )
        return attrs

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data['latitude'] = float(instance.user.latitude) if instance.user.latitude is not None else None
        data['longitude'] = float(instance.user.longitude) if instance.user.longitude is not None else None
        return data

    def update(self, instance, validated_data):
        # Coordinates live on the user address
        coords = {
            key: validated_data.pop(key)
            for key in ('latitude', 'longitude')
            if key in validated_data
        }
        if coords:
            for key, value in coords.items():
                setattr(instance.user, key, value)
            instance.user.save(update_fields=list(coords))
        return super().update(instance, validated_data)


class ProviderListSerializer(serializers.ModelSerializer):
    name = serializers.CharField(source='user.full_name', read_only=True)
    profile_image = serializers.ImageField(source='user.profile_image', read_only=True)
    city = serializers.CharField(source='user.city', read_only=True)
    state = serializers.CharField(source='user.state', read_only=True)
    distance_km = serializers.SerializerMethodField()

    class Meta:
        model = ServiceProvider
        fields = [
            'id', 'name', 'profile_image', 'city', 'state', 'description',
            'charges_travel', 'has_scheduling', 'has_quoting', 'is_highlighted',
            'average_rating', 'total_reviews', 'distance_km',
        ]

    def get_distance_km(self, obj):
        distance = getattr(obj, 'distance_km', None)
        return round(distance, 2) if distance is not None else None


class AdminUserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = [
            'id', 'email', 'first_name', 'last_name', 'role', 'phone', 'cpf_cnpj',
            'city', 'state', 'is_active', 'is_approved', 'approval_status',
            'email_verified', 'phone_verified', 'date_joined',
        ]
        read_only_fields = fields


class ModerationReasonSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, max_length=1000)


class ModerationLogSerializer(serializers.ModelSerializer):
    admin_email = serializers.EmailField(source='admin.email', read_only=True, default=None)

    class Meta:
        model = ModerationLog
        fields = ['id', 'action', 'reason', 'admin', 'admin_email', 'created_at']
        read_only_fields = fields


class FavoriteSerializer(serializers.ModelSerializer):
    provider_detail = ProviderListSerializer(source='provider', read_only=True)

    class Meta:
        model = Favorite
        fields = ['id', 'provider', 'provider_detail', 'created_at']
        read_only_fields = ['id', 'created_at']
