from datetime import timedelta
from decimal import Decimal

from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from catalog.models import ProviderService
from catalog.services.travel import Location, TravelSettings, calculate_travel_pricing
from payments.models import Payment
from .models import ServiceRequest, Availability, Review
from .services.availability import ensure_slot_free
from .services.status import can_transition

# Pending requests expire if the provider does not answer
REQUEST_EXPIRATION = timedelta(hours=72)


class ServiceRequestSerializer(serializers.ModelSerializer):
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    service_name = serializers.CharField(source='service.name', read_only=True)
    client_name = serializers.CharField(source='client.full_name', read_only=True)
    client_phone = serializers.CharField(source='client.phone', read_only=True)
    provider_name = serializers.CharField(source='provider.user.full_name', read_only=True)
    provider_user_id = serializers.IntegerField(source='provider.user_id', read_only=True)
    has_review = serializers.SerializerMethodField()

    class Meta:
        model = ServiceRequest
        fields = [
            'id',
            'client',
            'client_name',
            'client_phone',
            'provider',
            'provider_user_id',
            'provider_name',
            'service',
            'service_name',
            'request_type',
            'status',
            'status_display',
            'description',
            'scheduled_date',
            'scheduled_time',
            'address',
            'city',
            'state',
            'zip_code',
            'estimated_price',
            'base_price_snapshot',
            'travel_cost',
            'final_price',
            'payment_method',
            'cancellation_reason',
            'cancelled_by',
            'cancelled_at',
            'expires_at',
            'has_review',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_has_review(self, obj):
        return hasattr(obj, 'review')


class ServiceRequestCreateSerializer(serializers.ModelSerializer):
    preferred_date = serializers.DateField(required=False, allow_null=True, write_only=True)
    preferred_time = serializers.TimeField(required=False, allow_null=True, write_only=True)
    client_lat = serializers.FloatField(required=False, write_only=True, min_value=-90, max_value=90)
    client_lng = serializers.FloatField(required=False, write_only=True, min_value=-180, max_value=180)
    description = serializers.CharField(min_length=10)

    class Meta:
        model = ServiceRequest
        fields = [
            'id', 'provider', 'service', 'description',
            'preferred_date', 'preferred_time',
            'address', 'city', 'state', 'zip_code',
            'client_lat', 'client_lng',
        ]
        read_only_fields = ['id']

    def validate_provider(self, value):
        if not value.user.is_active:
            raise serializers.ValidationError(_("Profissional indisponível."))
        if value.user == self.context['request'].user:
            raise serializers.ValidationError(_("Você não pode solicitar um serviço a si mesmo."))
        return value

    def validate(self, attrs):
        provider, service = attrs['provider'], attrs['service']

        offering = ProviderService.objects.filter(
            provider=provider, service=service, is_active=True, service__is_active=True
        ).first()
        if offering is None:
            raise serializers.ValidationError(
                {'service': _("Este profissional não oferece o serviço informado.")}
            )
        attrs['offering'] = offering

        date, time = attrs.get('preferred_date'), attrs.get('preferred_time')
        if bool(date) != bool(time):
            raise serializers.ValidationError(
                _("Informe data e horário para agendar, ou nenhum dos dois para pedir orçamento.")
            )
        if date and date < timezone.localdate():
            raise serializers.ValidationError({'preferred_date': _("A data não pode estar no passado.")})

        if attrs.get('state'):
            attrs['state'] = attrs['state'].upper()
        return attrs

    def _travel_cost(self, provider, offering, attrs):
        if not (provider.charges_travel and offering.provides_home_service):
            return Decimal('0.00')

        client_address = ", ".join(
            part for part in (attrs.get('address'), attrs.get('city'), attrs.get('state'), attrs.get('zip_code'))
            if part
        )
        quote = calculate_travel_pricing(
            Location(provider.user.latitude, provider.user.longitude, provider.user.address_line()),
            TravelSettings.from_provider(provider),
            Location(attrs.get('client_lat'), attrs.get('client_lng'), client_address),
            base_price=offering.base_price,
        )
        return quote.travel_cost if quote.success else Decimal('0.00')

    def create(self, validated_data):
        offering = validated_data.pop('offering')
        date = validated_data.pop('preferred_date', None)
        time = validated_data.pop('preferred_time', None)
        client_location = {
            'client_lat': validated_data.pop('client_lat', None),
            'client_lng': validated_data.pop('client_lng', None),
        }
        provider = validated_data['provider']

        if date and time:
            ensure_slot_free(provider, date, time)
            validated_data['request_type'] = ServiceRequest.RequestType.SCHEDULING
            validated_data['scheduled_date'] = date
            validated_data['scheduled_time'] = time
        else:
            validated_data['request_type'] = ServiceRequest.RequestType.QUOTE

        travel_cost = self._travel_cost(provider, offering, {**validated_data, **client_location})
        validated_data['base_price_snapshot'] = offering.base_price
        validated_data['travel_cost'] = travel_cost
        if offering.base_price is not None:
            validated_data['estimated_price'] = offering.base_price + travel_cost
        validated_data['expires_at'] = timezone.now() + REQUEST_EXPIRATION

        return super().create(validated_data)


class PaymentInfoSerializer(serializers.Serializer):
    method = serializers.ChoiceField(choices=[
        Payment.Method.PIX,
        Payment.Method.CASH,
        Payment.Method.CREDIT_CARD,
        Payment.Method.DEBIT_CARD,
        Payment.Method.BANK_TRANSFER,
        Payment.Method.OTHER,
    ])
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'))


class BookingStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[
        ServiceRequest.Status.ACCEPTED,
        ServiceRequest.Status.REJECTED,
        ServiceRequest.Status.COMPLETED,
        ServiceRequest.Status.CANCELLED,
    ])
    reason = serializers.CharField(required=False, allow_blank=True, max_length=500)
    payment = PaymentInfoSerializer(required=False)

    def validate(self, attrs):
        current = self.instance.status
        new = attrs['status']

        if not can_transition(current, new):
            raise serializers.ValidationError(
                {'status': _("Não é possível mudar de %(current)s para %(new)s.") % {'current': current, 'new': new}}
            )

        if new == ServiceRequest.Status.COMPLETED and not attrs.get('payment'):
            raise serializers.ValidationError(
                {'payment': _("Informe valor e método de pagamento para concluir o serviço.")}
            )

        if new == ServiceRequest.Status.CANCELLED:
            reason = (attrs.get('reason') or '').strip()
            if len(reason) < 5:
                raise serializers.ValidationError(
                    {'reason': _("Informe um motivo de cancelamento (mínimo 5 caracteres).")}
                )
            attrs['reason'] = reason

        return attrs


class ScheduleQuoteSerializer(serializers.Serializer):
    scheduled_date = serializers.DateField()
    scheduled_time = serializers.TimeField()

    def validate_scheduled_date(self, value):
        if value < timezone.localdate():
            raise serializers.ValidationError(_("A data não pode estar no passado."))
        return value


class AvailabilitySerializer(serializers.ModelSerializer):
    day_name = serializers.CharField(source='get_day_of_week_display', read_only=True)

    class Meta:
        model = Availability
        fields = ['id', 'day_of_week', 'day_name', 'start_time', 'end_time', 'is_active']

    def validate(self, attrs):
        start = attrs.get('start_time', getattr(self.instance, 'start_time', None))
        end = attrs.get('end_time', getattr(self.instance, 'end_time', None))
        day = attrs.get('day_of_week', getattr(self.instance, 'day_of_week', None))

        if start and end and end <= start:
            raise serializers.ValidationError(
                {'end_time': _("O horário final deve ser posterior ao inicial.")}
            )

        provider = self.context.get('provider') or getattr(self.instance, 'provider', None)
        if provider is not None:
            duplicate = Availability.objects.filter(
                provider=provider, day_of_week=day, start_time=start, end_time=end
            )
            if self.instance:
                duplicate = duplicate.exclude(pk=self.instance.pk)
            if duplicate.exists():
                raise serializers.ValidationError(_("Este horário já está cadastrado."))

        return attrs


class ReviewSerializer(serializers.ModelSerializer):
    """Full review payload."""
    giver_name = serializers.CharField(source='giver.full_name', read_only=True)
    service_name = serializers.CharField(source='service_request.service.name', read_only=True)

    class Meta:
        model = Review
        fields = [
            'id', 'service_request', 'giver', 'giver_name', 'receiver',
            'service_name', 'rating', 'comment', 'created_at',
        ]
        read_only_fields = fields


class ReviewCreateSerializer(serializers.ModelSerializer):
    """
    Creates a review for the booking passed in context.

    Permission and status checks happen in the view; this enforces
    one review per booking and the rating range.
    """
    rating = serializers.IntegerField(min_value=1, max_value=5)
    comment = serializers.CharField(required=False, allow_blank=True, max_length=1000)

    class Meta:
        model = Review
        fields = ['service_request', 'rating', 'comment']

    def validate_service_request(self, value):
        if Review.objects.filter(service_request=value).exists():
            raise serializers.ValidationError(_("Esta solicitação já foi avaliada."))
        return value
