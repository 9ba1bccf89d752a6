"""
Message catalogue for every notification kind.

Each kind defines the in-app type, a title and a body template; the same
text feeds WhatsApp and email.
"""

from dataclasses import dataclass

from ..models import Notification

FOOTER = "\n\n---\nMyServ - Conectando você aos melhores profissionais"


@dataclass(frozen=True)
class MessageTemplate:
    type: str
    title: str
    body: str


class _Defaults(dict):
    def __missing__(self, key):
        return ''


TEMPLATES = {
    'welcome': MessageTemplate(
        Notification.Type.SYSTEM,
        "🎉 Bem-vindo ao MyServ!",
        "Olá {user_name}! Sua conta foi criada com sucesso. "
        "Encontre profissionais ou ofereça seus serviços em {base_url}.",
    ),
    'booking_request': MessageTemplate(
        Notification.Type.SERVICE_REQUEST,
        "🔔 Nova Solicitação de Serviço",
        "Olá {user_name}! Você recebeu uma nova solicitação.\n"
        "Serviço: {service_name}\nCliente: {client_name}\n"
        "Data: {date_display}\nValor: {amount_display}\n"
        "Acesse seu painel para aceitar ou recusar.",
    ),
    'booking_confirmed': MessageTemplate(
        Notification.Type.SERVICE_REQUEST,
        "✅ Solicitação Aceita",
        "Ótima notícia, {user_name}! Sua solicitação foi aceita.\n"
        "Serviço: {service_name}\nProfissional: {provider_name}\n"
        "Data: {date_display}\nValor: {amount_display}\n"
        "O profissional entrará em contato para finalizar os detalhes.",
    ),
    'booking_rejected': MessageTemplate(
        Notification.Type.SERVICE_REQUEST,
        "❌ Solicitação Recusada",
        "Olá {user_name}, infelizmente sua solicitação foi recusada.\n"
        "Serviço: {service_name}\nProfissional: {provider_name}\n"
        "Você pode solicitar o mesmo serviço a outros profissionais.",
    ),
    'service_completed': MessageTemplate(
        Notification.Type.SERVICE_REQUEST,
        "🎉 Serviço Concluído",
        "Parabéns {user_name}! O serviço {service_name} foi concluído.\n"
        "Valor: {amount_display}\nQue tal avaliar o atendimento?",
    ),
    'booking_cancelled': MessageTemplate(
        Notification.Type.SERVICE_REQUEST,
        "🚫 Solicitação Cancelada",
        "Olá {user_name}, a solicitação de {service_name} foi cancelada.\n"
        "Motivo: {reason}",
    ),
    'payment_reminder': MessageTemplate(
        Notification.Type.PAYMENT,
        "💳 Lembrete de Pagamento",
        "Olá {user_name}! Há um pagamento pendente referente a {service_name}.\n"
        "Valor: {amount_display}",
    ),
    'payment_status': MessageTemplate(
        Notification.Type.PAYMENT,
        "💳 Atualização de Pagamento",
        "Olá {user_name}! Seu pagamento de {amount_display} está: {status}.",
    ),
    'review_received': MessageTemplate(
        Notification.Type.REVIEW,
        "⭐ Nova Avaliação",
        "Olá {user_name}! {client_name} avaliou o serviço {service_name} com {rating} estrela(s).",
    ),
}


def _amount_display(amount):
    if amount in (None, ''):
        return "A negociar"
    return f"R$ {float(amount):.2f}".replace('.', ',')


def render(kind, context):
    """Returns ``(template, title, body)`` for ``kind`` filled with ``context``."""
    template = TEMPLATES[kind]
    values = _Defaults({key: value for key, value in context.items() if value is not None})
    values.setdefault('amount_display', _amount_display(context.get('amount')))
    date = context.get('scheduled_date')
    time = context.get('scheduled_time')
    values.setdefault('date_display', f"{date} {time or ''}".strip() if date else "A combinar")
    return template, template.title.format_map(values), template.body.format_map(values)
