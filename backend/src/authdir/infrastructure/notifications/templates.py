"""Jinja2 templates for recovery-outcome emails."""
from dataclasses import dataclass

from jinja2 import DictLoader, Environment, select_autoescape

from authdir.domain.recovery.entities import ResponseTemplate

_SIGNATURE = (
    "<div style='margin-top:2rem;text-align:center;'>Atentamente</div>"
    "<b style='padding-top:0.2rem;text-align:center;'>{{ organization }}</b>"
)

_TEMPLATES = {
    "finished.html": (
        "<body style='margin:2rem auto;width:36rem'>"
        "<p>Estimado(a) <b>{{ full_name }}</b>:</p>"
        "<p>Su solicitud de recuperación de cuenta ha concluido. "
        "Ya puede acceder nuevamente con su llave digital.</p>"
        "{% if comments %}<p>{{ comments }}</p>{% endif %}"
        + _SIGNATURE + "</body>"
    ),
    "incompleted.html": (
        "<body style='margin:2rem auto;width:36rem'>"
        "<p>Estimado(a) <b>{{ full_name }}</b>:</p>"
        "<p>Su solicitud de recuperación de cuenta no pudo completarse por el siguiente motivo:</p>"
        "<p>{{ comments }}</p>"
        "<p>Puede registrar una nueva solicitud con la información corregida.</p>"
        + _SIGNATURE + "</body>"
    ),
    "not_found.html": (
        "<body style='margin:2rem auto;width:36rem'>"
        "<p>Estimado(a) <b>{{ full_name }}</b>:</p>"
        "<p>No encontramos una cuenta que coincida con los datos proporcionados.</p>"
        "{% if comments %}<p>{{ comments }}</p>{% endif %}"
        + _SIGNATURE + "</body>"
    ),
    "custom.html": (
        "<body style='margin:2rem auto;width:36rem'>"
        "<p>Estimado(a) <b>{{ full_name }}</b>:</p>"
        "<p>{{ comments }}</p>"
        + _SIGNATURE + "</body>"
    ),
}

_FILES = {
    ResponseTemplate.FINISHED: ("finished.html", "Actualización de Correo Electrónico"),
    ResponseTemplate.INCOMPLETED: ("incompleted.html", "Solicitud de Recuperación de Cuenta Incompleta"),
    ResponseTemplate.NOT_FOUND: ("not_found.html", "Solicitud de Recuperación de Cuenta sin Coincidencia"),
    ResponseTemplate.CUSTOM: ("custom.html", "Solicitud de Recuperación de Cuenta"),
}

_env = Environment(loader=DictLoader(_TEMPLATES), autoescape=select_autoescape(default=True))


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html_body: str


def render_outcome(
    template: ResponseTemplate,
    full_name: str,
    comments: str | None,
    organization: str = "Fiscalía General de Justicia del Estado de Tamaulipas",
) -> RenderedEmail:
    file_name, subject = _FILES[template]
    body = _env.get_template(file_name).render(
        full_name=full_name,
        comments=comments or "",
        organization=organization,
    )
    return RenderedEmail(subject=subject, html_body=body)
