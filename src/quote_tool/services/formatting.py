"""
Formatting helpers for German-locale price displays and the quote summary
included in contact notifications.
"""
from datetime import datetime
from typing import Optional

INDUSTRY_NAMES = {
    'shk': 'SHK (Sanitär, Heizung, Klima)',
    'sanitaer': 'Sanitär / Installateur',
    'heizung': 'Heizungsbau / Heizungstechnik',
    'klima': 'Klimatechnik / Lüftung',
    'elektrik': 'Elektrik / Elektroinstallation',
    'baugewerbe': 'Baugewerbe allgemein',
    'andere': 'Andere Handwerksbranche',
}

WEBSITE_TYPE_NAMES = {
    'neue-website': 'Neue SHK Webseite erstellen',
    'website-redesign': 'Handwerker Website überarbeiten',
    'ki-integration': 'KI-Integration in bestehende Website',
    'vollservice': 'Komplette Digitalisierung Handwerksbetrieb',
}


def format_price(amount: int, sign: str = "") -> str:
    """Format a whole-euro amount, e.g. 1250 → '1.250€'."""
    return f"{sign}{amount:,}€".replace(",", ".")


def format_percent(rate: float) -> str:
    return f"{rate * 100:.0f}%"


def format_timestamp(value: str) -> Optional[str]:
    """Render an ISO-8601 timestamp as 'DD.MM.YYYY, HH:MM Uhr'."""
    try:
        moment = datetime.fromisoformat(value)
    except (TypeError, ValueError):
        return None
    return moment.strftime("%d.%m.%Y, %H:%M Uhr")


def format_quote(quote: Optional[dict]) -> str:
    """
    Render a serialized QuoteRecord as a plain-text block.

    Unknown or malformed structures degrade to a short notice instead of
    failing the whole submission.
    """
    if not quote:
        return "Keine Kalkulator-Daten verfügbar"

    try:
        base = quote.get("base") or {}
        if base:
            base_line = f"{base.get('name', base.get('id'))} ({format_price(int(base['price']))}/Monat)"
        else:
            base_line = "Nicht ausgewählt"
        lines = ["GEWÄHLTES PAKET:", f"• {base_line}", "", "ZUSATZMODULE:"]

        addons = quote.get("addons") or []
        if addons:
            for addon in addons:
                lines.append(
                    f"• {addon.get('name', addon.get('id'))} (+{format_price(int(addon['price']))}/Monat)"
                )
        else:
            lines.append("• Keine Zusatzmodule ausgewählt")

        details = quote.get("details") or {}
        if details:
            lines += ["", "DETAILS:"]
            for attribute, option in details.items():
                lines.append(f"• {attribute}: {option}")

        contract = quote.get("contract")
        if contract:
            label = contract.get("label", contract.get("id"))
            discount = float(contract.get("discount") or 0)
            if discount:
                label = f"{label} ({format_percent(discount)} Rabatt)"
            lines += ["", "VERTRAGSINFORMATIONEN:", f"• Laufzeit: {label}"]

        prices = quote.get("prices")
        if prices:
            lines += [
                "",
                "PREISÜBERSICHT:",
                f"• Basis-Paket: {format_price(prices['base'])}/Monat",
                f"• Zusatzmodule: {format_price(prices['addons'])}/Monat",
                f"• Support: {format_price(prices['support'])}/Monat",
                f"• Zwischensumme: {format_price(prices['subtotal'])}/Monat",
            ]
            if prices.get("discount", 0) > 0:
                lines.append(f"• Rabatt: {format_price(prices['discount'], sign='-')}/Monat")
            lines.append(f"• Monatlicher Gesamtpreis: {format_price(prices['total'])}")
            lines.append(f"• Einmalige Setup-Gebühr: {format_price(prices['setup'])}")

        stamp = format_timestamp(quote.get("timestamp"))
        if stamp:
            lines += ["", f"Konfigurations-Zeitstempel: {stamp}"]
    except (AttributeError, KeyError, TypeError, ValueError):
        return "Kalkulator-Daten konnten nicht verarbeitet werden"

    return "\n".join(lines)
