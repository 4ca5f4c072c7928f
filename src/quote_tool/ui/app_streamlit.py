"""
Streamlit UI for the quote configurator.

Features:
- Four-step wizard: package, add-ons, details, contract
- Live price summary with selected items
- Calculation trace for every price field
- Contact form that relays the generated quote by email
- Export of the quote as JSON/CSV
"""
import streamlit as st
import pandas as pd
import asyncio
import json
import sys
from pathlib import Path

# Add src to path for imports
src_path = Path(__file__).parent.parent.parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from quote_tool.api.state import get_catalog
from quote_tool.config.logging import setup_logging
from quote_tool.config.settings import get_settings
from quote_tool.engine import QuoteEngine, QuoteEngineError, WizardStep
from quote_tool.services.formatting import INDUSTRY_NAMES, WEBSITE_TYPE_NAMES, format_price
from quote_tool.services.submission_service import ContactRequest, SubmissionService


st.set_page_config(
    page_title="Preiskalkulator SHK Website",
    layout="wide",
    initial_sidebar_state="expanded"
)

setup_logging()

STEP_TITLES = {
    WizardStep.CHOOSE_BASE: "Paket wählen",
    WizardStep.CHOOSE_ADDONS: "Zusatzmodule",
    WizardStep.CHOOSE_DETAILS: "Details",
    WizardStep.CHOOSE_CONTRACT: "Vertragslaufzeit",
}

DETAIL_TITLES = {
    'company-size': "Unternehmensgröße",
    'locations': "Anzahl Standorte",
    'support': "Support-Level",
}


@st.cache_resource
def get_catalog_cached():
    """Get cached catalog instance."""
    return get_catalog()


try:
    catalog = get_catalog_cached()
    settings = get_settings()
except Exception as e:
    st.error(f"Systemfehler: {e}")
    st.stop()

# One engine per browser session
if 'engine' not in st.session_state:
    st.session_state.engine = QuoteEngine(catalog, **settings.engine_options())
if 'quote' not in st.session_state:
    st.session_state.quote = None

engine: QuoteEngine = st.session_state.engine


def run_action(action, *args):
    """Call an engine operation and surface rejections instead of crashing."""
    try:
        action(*args)
    except QuoteEngineError as e:
        st.session_state.flash = str(e)
        return False
    st.session_state.quote = None
    return True


# ============================================================================
# SIDEBAR: Price Summary
# ============================================================================
with st.sidebar:
    st.header("💶 Ihre Konfiguration")

    prices = engine.snapshot
    with st.container(border=True):
        m1, m2 = st.columns(2)
        m1.metric("Monatlich", format_price(prices.total))
        m2.metric("Setup einmalig", format_price(prices.setup))

        st.caption(f"Basis-Paket: {format_price(prices.base)}")
        st.caption(f"Zusatzmodule: {format_price(prices.addons)}")
        st.caption(f"Support: {format_price(prices.support)}")
        st.caption(f"Zwischensumme: {format_price(prices.subtotal)}")
        if prices.discount > 0:
            st.markdown(f":green[**Rabatt: {format_price(prices.discount, sign='-')}**]")

    items = engine.selected_items()
    if items:
        st.markdown("**Gewählte Leistungen**")
        for item in items:
            price = f"+{format_price(item.price)}" if item.kind != 'base' and item.price else (
                format_price(item.price) if item.price is not None else ""
            )
            st.caption(f"{item.label} {price}")

    with st.expander("🔍 Berechnungsdetails"):
        for t in engine.explain():
            if t.value:
                st.caption(f"**{t.step}**: {t.description} = `{t.value}`")
            else:
                st.caption(f"**{t.step}**: {t.description}")

    st.divider()
    if st.button("↺ Neu starten", use_container_width=True):
        engine.reset()
        st.session_state.quote = None
        # Widgets would otherwise replay their old values into the fresh engine
        for key in [k for k in st.session_state if k.startswith(('addon_', 'detail_'))]:
            del st.session_state[key]
        st.rerun()


# ============================================================================
# MAIN CONTENT: WIZARD
# ============================================================================
st.title("Preiskalkulator")
st.caption("Individuelles Angebot für Ihre Handwerker-Website in 4 Schritten.")

step = WizardStep(engine.current_step)
step_cols = st.columns(engine.total_steps)
for s, col in zip(WizardStep, step_cols):
    marker = "🔵" if s == step else ("✅" if s < step else "⚪")
    col.markdown(f"{marker} **{int(s)}. {STEP_TITLES[s]}**")

if st.session_state.get('flash'):
    st.warning(st.session_state.pop('flash'))

with st.container(border=True):
    # ------------------------------------------------------------------
    # STEP 1: Base package
    # ------------------------------------------------------------------
    if step == WizardStep.CHOOSE_BASE:
        st.subheader("Welches Paket passt zu Ihrem Betrieb?")
        cols = st.columns(len(catalog.packages))
        for package, col in zip(catalog.packages, cols):
            with col:
                selected = engine.selection.base is not None and engine.selection.base.id == package.id
                st.markdown(f"#### {package.name}")
                st.markdown(f"**{format_price(package.price)}** / Monat")
                st.caption(f"Setup ab {format_price(package.setup_fee)}")
                if st.button("✔ Ausgewählt" if selected else "Auswählen",
                             key=f"base_{package.id}",
                             type="primary" if selected else "secondary",
                             use_container_width=True):
                    run_action(engine.select_base, package.id)
                    st.rerun()

    # ------------------------------------------------------------------
    # STEP 2: Add-ons
    # ------------------------------------------------------------------
    elif step == WizardStep.CHOOSE_ADDONS:
        st.subheader("Zusatzmodule (optional)")
        for addon in catalog.addons:
            included = addon.id in engine.selection.addons
            checked = st.checkbox(
                f"{addon.name} (+{format_price(addon.price)}/Monat)",
                value=included,
                key=f"addon_{addon.id}"
            )
            if checked != included:
                run_action(engine.toggle_addon, addon.id, checked)
                st.rerun()

    # ------------------------------------------------------------------
    # STEP 3: Details
    # ------------------------------------------------------------------
    elif step == WizardStep.CHOOSE_DETAILS:
        st.subheader("Details zu Ihrem Unternehmen")
        if engine.min_details_for_contract_step:
            st.caption(f"Bitte mindestens {engine.min_details_for_contract_step} Angaben machen.")
        cols = st.columns(max(len(catalog.detail_attributes()), 1))
        for attribute, col in zip(catalog.detail_attributes(), cols):
            options = catalog.detail_options(attribute)
            ids = [o.id for o in options]
            # Unanswered attributes stay empty so that confirming the default
            # still records an explicit choice
            current = engine.selection.details.get(attribute)
            default = catalog.default_detail_option(attribute)
            labels = {
                o.id: (f"{o.label} (+{o.modifier:.0%})" if o.is_percentage
                       else f"{o.label} (+{format_price(o.price)})" if o.price else o.label)
                for o in options
            }
            with col:
                chosen = st.selectbox(
                    DETAIL_TITLES.get(attribute, attribute),
                    options=ids,
                    index=ids.index(current) if current is not None else None,
                    placeholder=f"Standard: {labels[default.id]}" if default else "Bitte wählen",
                    format_func=lambda option_id, labels=labels: labels[option_id],
                    key=f"detail_{attribute}"
                )
            if chosen is not None and chosen != current:
                run_action(engine.set_detail, attribute, chosen)
                st.rerun()

    # ------------------------------------------------------------------
    # STEP 4: Contract term
    # ------------------------------------------------------------------
    elif step == WizardStep.CHOOSE_CONTRACT:
        st.subheader("Vertragslaufzeit")
        cols = st.columns(len(catalog.contract_terms))
        for term, col in zip(catalog.contract_terms, cols):
            with col:
                selected = engine.selection.contract is not None and engine.selection.contract.id == term.id
                st.markdown(f"#### {term.label}")
                st.caption(f"{term.discount:.0%} Rabatt" if term.discount else "Kein Rabatt")
                if st.button("✔ Ausgewählt" if selected else "Auswählen",
                             key=f"contract_{term.id}",
                             type="primary" if selected else "secondary",
                             use_container_width=True):
                    run_action(engine.select_contract, term.id)
                    st.rerun()

    # Navigation
    st.divider()
    nav1, nav2, nav3 = st.columns([1, 1, 2])
    with nav1:
        if st.button("← Zurück", disabled=not engine.can_retreat, use_container_width=True):
            run_action(engine.retreat)
            st.rerun()
    with nav2:
        if st.button("Weiter →", disabled=not engine.can_advance, use_container_width=True):
            run_action(engine.advance)
            st.rerun()
    with nav3:
        if st.button("📨 Angebot anfordern", type="primary",
                     disabled=not engine.can_generate_quote, use_container_width=True):
            try:
                st.session_state.quote = engine.generate_quote()
            except QuoteEngineError as e:
                st.warning(str(e))


# ============================================================================
# QUOTE & CONTACT FORM
# ============================================================================
quote = st.session_state.quote
if quote is not None:
    st.markdown("### 📝 Ihr Angebot")
    q1, q2, q3 = st.columns(3)
    q1.metric("Monatlicher Gesamtpreis", format_price(quote.total))
    q2.metric("Einmalige Setup-Gebühr", format_price(quote.setup))
    q3.metric("Laufzeit", quote.contract.label)

    export_df = pd.DataFrame(
        [{'Position': quote.base.name, 'Preis/Monat': quote.base.price}] +
        [{'Position': a.name, 'Preis/Monat': a.price} for a in quote.addons]
    )
    st.dataframe(export_df, use_container_width=True, hide_index=True)

    d1, d2 = st.columns(2)
    with d1:
        st.download_button(
            "📥 JSON",
            data=json.dumps(quote.to_dict(), ensure_ascii=False, indent=2),
            file_name="angebot.json",
            mime="application/json",
            use_container_width=True
        )
    with d2:
        st.download_button(
            "📥 CSV",
            data=export_df.to_csv(index=False),
            file_name="angebot.csv",
            mime="text/csv",
            use_container_width=True
        )

    st.markdown("### ✉️ Kontakt")
    with st.form("contact_form"):
        c1, c2 = st.columns(2)
        name = c1.text_input("Name*")
        company = c2.text_input("Unternehmen*")
        email = c1.text_input("E-Mail*")
        phone = c2.text_input("Telefon")
        industry = c1.selectbox("Branche*", options=list(INDUSTRY_NAMES),
                                format_func=lambda key: INDUSTRY_NAMES[key])
        website_type = c2.selectbox("Gewünschte Website", options=[""] + list(WEBSITE_TYPE_NAMES),
                                    format_func=lambda key: WEBSITE_TYPE_NAMES.get(key, "Bitte wählen"))
        message = st.text_area("Nachricht")
        submitted = st.form_submit_button("Anfrage senden", type="primary")

    if submitted:
        contact = ContactRequest(
            name=name.strip(),
            company=company.strip(),
            email=email.strip(),
            phone=phone.strip(),
            industry=industry,
            website_type=website_type,
            message=message.strip(),
            quote=quote.to_dict(),
        )
        service = SubmissionService(settings=settings)
        with st.spinner("Wird gesendet..."):
            result = asyncio.run(service.submit(contact))
        if result.success:
            st.success(result.message)
        else:
            st.error(result.error)
