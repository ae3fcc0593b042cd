"""Built-in named templates and the default message that uses them."""

from __future__ import annotations

SUBJECT = (
    '[{{ Status | toUpper }}{% if Status == "firing" %}:{{ Alerts.Firing | length }}{% endif %}] '
    '{{ GroupLabels.SortedPairs.Values | join(" ") }} '
    "{% if CommonLabels | length > GroupLabels | length %}"
    '({{ CommonLabels.Remove(GroupLabels.Names).Values | join(" ") }})'
    "{% endif %}"
)

ALERTMANAGER_URL = "{{ ExternalURL }}/#/alerts?receiver={{ Receiver }}"

# Renders the ``alerts`` sequence set by the including template.
TEXT_ALERT_LIST = """{% for alert in alerts %}
**Labels**
{% for pair in alert.Labels.SortedPairs %}> - {{ pair.Name }}: {{ pair.Value | markdown | html }}
{% endfor %}
**Annotations**
{% for pair in alert.Annotations.SortedPairs %}> - {{ pair.Name }}: {{ pair.Value | markdown | html }}
{% endfor %}
**Source:** [{{ alert.GeneratorURL }}]({{ alert.GeneratorURL }})
{% endfor %}"""

LINK_TITLE = '{% include "__subject" %}'

LINK_CONTENT = r"""#### \[{{ Status | toUpper }}{% if Status == "firing" %}:{{ Alerts.Firing | length }}{% endif %}\] **[{{ GroupLabels["alertname"] }}]({% include "__alertmanagerURL" %})**
{% if Alerts.Firing | length > 0 -%}
**Alerts Firing**
{% with alerts = Alerts.Firing %}{% include "__text_alert_list" %}{% endwith %}
{%- endif %}
{% if Alerts.Resolved | length > 0 -%}
**Alerts Resolved**
{% with alerts = Alerts.Resolved %}{% include "__text_alert_list" %}{% endwith %}
{%- endif %}"""

DEFAULT_TEMPLATES: dict[str, str] = {
    "__subject": SUBJECT,
    "__alertmanagerURL": ALERTMANAGER_URL,
    "__text_alert_list": TEXT_ALERT_LIST,
    "ding.link.title": LINK_TITLE,
    "ding.link.content": LINK_CONTENT,
}

DEFAULT_TITLE = '{% include "ding.link.title" %}'
DEFAULT_TEXT = '{% include "ding.link.content" %}'
