from decimal import Decimal

from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from .models import Plan, Subscription, Payment, Coupon


class PlanSerializer(serializers.ModelSerializer):
    class Meta:
        model = Plan
        fields = ['id', 'name', 'description', 'price', 'billing_cycle', 'features', 'is_active']


class SubscriptionSerializer(serializers.ModelSerializer):
    plan = PlanSerializer(read_only=True)

    class Meta:
        model = Subscription
        fields = ['id', 'plan', 'status', 'start_date', 'end_date', 'is_auto_renew', 'created_at']
        read_only_fields = fields


class PaymentSerializer(serializers.ModelSerializer):
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    plan_name = serializers.CharField(source='plan.name', read_only=True, default=None)
    service_name = serializers.CharField(source='service_request.service.name', read_only=True, default=None)

    class Meta:
        model = Payment
        fields = [
            'id', 'amount', 'currency', 'payment_method', 'gateway', 'gateway_payment_id',
            'purpose', 'status', 'status_display', 'description',
            'service_request', 'service_name', 'subscription', 'plan', 'plan_name',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


class AdminPaymentSerializer(PaymentSerializer):
    user_email = serializers.EmailField(source='user.email', read_only=True)

    class Meta(PaymentSerializer.Meta):
        fields = PaymentSerializer.Meta.fields + ['user', 'user_email']
        read_only_fields = fields


class CouponSerializer(serializers.ModelSerializer):
    class Meta:
        model = Coupon
        fields = [
            'id', 'code', 'discount_type', 'value', 'applies_to',
            'valid_from', 'valid_to', 'is_active', 'created_at',
        ]
        read_only_fields = ['id', 'created_at']

    def validate_code(self, value):
        value = value.strip().upper()
        duplicate = Coupon.objects.filter(code=value)
        if self.instance:
            duplicate = duplicate.exclude(pk=self.instance.pk)
        if duplicate.exists():
            raise serializers.ValidationError(_("Já existe um cupom com este código."))
        return value

    def validate(self, attrs):
        discount_type = attrs.get('discount_type', getattr(self.instance, 'discount_type', None))
        value = attrs.get('value', getattr(self.instance, 'value', None))
        if discount_type == Coupon.DiscountType.PERCENT and value is not None and value > 100:
            raise serializers.ValidationError({'value': _("Desconto percentual não pode passar de 100%.")})

        valid_from = attrs.get('valid_from', getattr(self.instance, 'valid_from', None))
        valid_to = attrs.get('valid_to', getattr(self.instance, 'valid_to', None))
        if valid_from and valid_to and valid_to <= valid_from:
            raise serializers.ValidationError({'valid_to': _("A data final deve ser posterior à inicial.")})
        return attrs


class UnlockRequestSerializer(serializers.Serializer):
    request_id = serializers.IntegerField()


class SubscribeSerializer(serializers.Serializer):
    plan_id = serializers.IntegerField()
    coupon_code = serializers.CharField(required=False, allow_blank=True)


class FeeQuoteSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'))
    scheduling = serializers.BooleanField(required=False, default=True)
