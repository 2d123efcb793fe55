"""
Streamlit Frontend for GastoZen

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Every ledger rejection is shown, in plain Spanish
3. The assistant only fills the form; the user always presses "Guardar"
4. Destructive actions (import, reset) need an explicit confirmation

All state changes go through the flows built by create_app_components.
"""

import asyncio
from decimal import Decimal

import streamlit as st

from gastozen.config import get_settings, validate_all_settings
from gastozen.ledger import format_amount
from gastozen.models import (
    AccountType,
    Category,
    CategoryInput,
    Theme,
    TransactionFormValues,
    TransactionType,
)
from gastozen.orchestrator import AppComponents, create_app_components
from gastozen.queries import expenses_by_category, monthly_totals, total_balance
from gastozen.services.storage import StorageError
from gastozen.validation import get_user_friendly_summary


# Page configuration
st.set_page_config(
    page_title="GastoZen",
    page_icon="🧘",
    layout="wide",
    initial_sidebar_state="expanded",
)

LIGHT_CSS = """
<style>
    .stButton>button {
        width: 100%;
    }
    .big-number {
        font-size: 2.2em;
        font-weight: bold;
        color: #2c3e50;
    }
    .category-badge {
        padding: 2px 10px;
        border-radius: 10px;
        color: white;
        font-size: 0.85em;
    }
</style>
"""

DARK_CSS = """
<style>
    .stApp {
        background-color: #111827;
        color: #F3F4F6;
    }
    .big-number {
        font-size: 2.2em;
        font-weight: bold;
        color: #F3F4F6;
    }
    .category-badge {
        padding: 2px 10px;
        border-radius: 10px;
        color: white;
        font-size: 0.85em;
    }
</style>
"""


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components() -> AppComponents:
    """Get or create application components (cached)."""
    return create_app_components()


def money(value: Decimal) -> str:
    return f"{get_settings().app.currency_symbol} {format_amount(value)}"


def show_outcome(outcome) -> bool:
    if outcome.success:
        st.success(outcome.message)
    else:
        st.error(outcome.message)
    return outcome.success


def main():
    """Main application entry point."""
    components = get_components()
    engine = components.engine

    st.markdown(DARK_CSS if engine.theme is Theme.DARK else LIGHT_CSS, unsafe_allow_html=True)

    st.sidebar.title("🧘 GastoZen")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Ir a:",
        ["📊 Panel", "💸 Transacciones", "🏦 Cuentas", "🏷️ Categorías", "⚙️ Configuración"],
        index=0,
    )

    st.sidebar.markdown("---")
    st.sidebar.metric("Saldo total", money(total_balance(engine.accounts)))

    if page == "📊 Panel":
        render_dashboard_page(components)
    elif page == "💸 Transacciones":
        render_transactions_page(components)
    elif page == "🏦 Cuentas":
        render_accounts_page(components)
    elif page == "🏷️ Categorías":
        render_categories_page(components)
    elif page == "⚙️ Configuración":
        render_settings_page(components)


def render_dashboard_page(components: AppComponents):
    engine = components.engine
    st.title("📊 Panel")

    totals = monthly_totals(engine.transactions)
    col1, col2, col3 = st.columns(3)
    with col1:
        st.markdown("Saldo Total")
        st.markdown(
            f'<p class="big-number">{money(total_balance(engine.accounts))}</p>',
            unsafe_allow_html=True,
        )
    with col2:
        st.metric("Ingresos del mes", money(totals.income))
    with col3:
        st.metric("Gastos del mes", money(totals.expenses))

    st.markdown("---")
    st.subheader("Principales categorías de gasto")
    top = expenses_by_category(engine.transactions, engine.categories)
    if not top:
        st.info("Todavía no hay gastos este mes.")
    for item in top:
        st.markdown(
            f'<span class="category-badge" style="background-color:{item.color}">'
            f"{item.name}</span> {money(item.total)}",
            unsafe_allow_html=True,
        )

    st.markdown("---")
    st.subheader("Cuentas")
    for account in engine.accounts:
        st.markdown(f"{account.icon or ''} **{account.name}** · {money(account.balance)}")


def _category_label(category: Category) -> str:
    return f"{category.icon or ''} {category.name}".strip()


def render_transaction_form(components: AppComponents):
    engine = components.engine
    values: TransactionFormValues = st.session_state.get("form_values") or TransactionFormValues()
    editing_id = st.session_state.get("editing_id")

    st.subheader("✏️ Editar transacción" if editing_id else "➕ Nueva transacción")

    type_label = st.radio(
        "Tipo",
        [TransactionType.EXPENSE.label, TransactionType.INCOME.label],
        index=0 if values.type is TransactionType.EXPENSE else 1,
        horizontal=True,
    )
    transaction_type = (
        TransactionType.INCOME if type_label == TransactionType.INCOME.label
        else TransactionType.EXPENSE
    )

    categories = engine.categories_of(transaction_type)
    accounts = list(engine.accounts)
    category_ids = [c.id for c in categories]
    account_ids = [a.id for a in accounts]

    with st.form("transaction_form"):
        col1, col2 = st.columns(2)
        with col1:
            amount = st.number_input(
                "Monto",
                min_value=0.0,
                value=float(values.amount),
                step=1000.0,
            )
            description = st.text_input("Descripción", value=values.description)
            tx_date = st.date_input("Fecha", value=values.date)
        with col2:
            category_id = st.selectbox(
                "Categoría",
                category_ids,
                index=category_ids.index(values.category_id) if values.category_id in category_ids else 0,
                format_func=lambda cid: _category_label(engine.get_category(cid)),
            ) if category_ids else ""
            account_id = st.selectbox(
                "Cuenta",
                account_ids,
                index=account_ids.index(values.account_id) if values.account_id in account_ids else 0,
                format_func=lambda aid: engine.get_account(aid).name,
            ) if account_ids else ""
            notes = st.text_area("Notas", value=values.notes or "")

        submitted = st.form_submit_button("💾 Guardar", type="primary")

    if submitted:
        form_values = TransactionFormValues(
            description=description,
            amount=Decimal(str(amount)),
            type=transaction_type,
            category_id=category_id or "",
            account_id=account_id or "",
            date=tx_date,
            notes=notes or None,
        )
        validation, outcome = components.transactions.submit(form_values, transaction_id=editing_id)
        if outcome is None:
            st.error(get_user_friendly_summary(validation))
        else:
            if validation.warnings:
                st.warning(get_user_friendly_summary(validation))
            if show_outcome(outcome):
                st.session_state.form_values = None
                st.session_state.editing_id = None

    if editing_id and st.button("Cancelar edición"):
        st.session_state.form_values = None
        st.session_state.editing_id = None
        st.rerun()


def render_assistant(components: AppComponents):
    with st.expander("✨ Asistente (describe la transacción con tus palabras)"):
        if not components.drafts.is_available:
            st.info("El asistente no está configurado. Define GEMINI_API_KEY para activarlo.")
            return
        text = st.text_input("Por ejemplo: «gasté 30mil en el super ayer»", key="assistant_text")
        if st.button("✨ Sugerir"):
            with st.spinner("Interpretando..."):
                result = run_async(components.drafts.draft(text))
            if result.success:
                st.session_state.form_values = result.values
                st.session_state.editing_id = None
                st.rerun()
            else:
                st.warning(result.message)


def render_transactions_page(components: AppComponents):
    engine = components.engine
    st.title("💸 Transacciones")

    render_assistant(components)
    render_transaction_form(components)

    st.markdown("---")
    st.subheader("Historial")
    if not engine.transactions:
        st.info("No hay transacciones todavía.")
        return

    for transaction in engine.transactions:
        category = engine.get_category(transaction.category_id)
        account = engine.get_account(transaction.account_id)
        sign = "+" if transaction.type is TransactionType.INCOME else "-"

        col1, col2, col3, col4 = st.columns([2, 5, 2, 2])
        with col1:
            st.markdown(transaction.date.strftime("%d/%m/%Y"))
        with col2:
            st.markdown(
                f"**{transaction.description or 'N/A'}** · "
                f"{category.name if category else 'Sin Categoría'} · "
                f"{account.name if account else 'N/A'}"
            )
        with col3:
            st.markdown(f"{sign}{money(transaction.amount)}")
        with col4:
            edit_col, delete_col = st.columns(2)
            if edit_col.button("✏️", key=f"edit-{transaction.id}"):
                st.session_state.editing_id = transaction.id
                st.session_state.form_values = TransactionFormValues(
                    **transaction.model_dump(exclude={"id"})
                )
                st.rerun()
            if delete_col.button("🗑️", key=f"delete-{transaction.id}"):
                if show_outcome(components.transactions.delete(transaction.id)):
                    st.rerun()


def render_accounts_page(components: AppComponents):
    engine = components.engine
    st.title("🏦 Cuentas")

    account_types = list(AccountType)
    editing = engine.get_account(st.session_state.get("editing_account_id") or "")

    with st.form("account_form"):
        st.subheader(f"✏️ Editar {editing.name}" if editing else "➕ Nueva cuenta")
        name = st.text_input("Nombre", value=editing.name if editing else "")
        account_type = st.selectbox(
            "Tipo",
            account_types,
            index=account_types.index(editing.type) if editing else 0,
            format_func=lambda t: t.label,
        )
        raw_balance = st.text_input(
            "Saldo Actual" if editing else "Saldo Inicial",
            value=str(editing.balance) if editing else "0",
        )
        color = st.color_picker("Color", value=editing.color if editing else "#3B82F6")
        icon = st.text_input("Icono", value=(editing.icon or "") if editing else "🏛️")
        submitted = st.form_submit_button("💾 Guardar", type="primary")

    if submitted:
        validation, outcome = components.accounts.submit(
            name=name,
            raw_balance=raw_balance,
            account_type=account_type,
            color=color,
            icon=icon or None,
            account_id=editing.id if editing else None,
        )
        if outcome is None:
            st.error(get_user_friendly_summary(validation))
        else:
            if validation.warnings:
                st.warning(get_user_friendly_summary(validation))
            if show_outcome(outcome):
                st.session_state.editing_account_id = None

    st.markdown("---")
    for account in engine.accounts:
        col1, col2, col3, col4 = st.columns([5, 3, 1, 1])
        col1.markdown(f"{account.icon or ''} **{account.name}** · {account.type.label}")
        col2.markdown(money(account.balance))
        if col3.button("✏️", key=f"edit-acc-{account.id}"):
            st.session_state.editing_account_id = account.id
            st.rerun()
        if col4.button("🗑️", key=f"delete-acc-{account.id}"):
            if show_outcome(components.accounts.delete(account.id)):
                st.rerun()


def render_categories_page(components: AppComponents):
    engine = components.engine
    st.title("🏷️ Categorías")

    with st.form("category_form"):
        st.subheader("➕ Nueva categoría")
        name = st.text_input("Nombre")
        type_label = st.radio(
            "Tipo",
            [TransactionType.EXPENSE.label, TransactionType.INCOME.label],
            horizontal=True,
        )
        color = st.color_picker("Color", value="#A855F7")
        icon = st.text_input("Icono")
        submitted = st.form_submit_button("💾 Guardar", type="primary")

    if submitted:
        if not name.strip():
            st.error("El nombre de la categoría es obligatorio.")
        else:
            category_type = (
                TransactionType.INCOME if type_label == TransactionType.INCOME.label
                else TransactionType.EXPENSE
            )
            show_outcome(engine.add_category(CategoryInput(
                name=name, type=category_type, color=color, icon=icon or None,
            )))

    for transaction_type in (TransactionType.EXPENSE, TransactionType.INCOME):
        st.markdown("---")
        st.subheader("Gastos" if transaction_type is TransactionType.EXPENSE else "Ingresos")
        for category in engine.categories_of(transaction_type):
            col1, col2 = st.columns([9, 1])
            col1.markdown(
                f'<span class="category-badge" style="background-color:{category.color}">'
                f"{_category_label(category)}</span>",
                unsafe_allow_html=True,
            )
            if col2.button("🗑️", key=f"delete-cat-{category.id}"):
                if show_outcome(engine.delete_category(category.id)):
                    st.rerun()


def render_settings_page(components: AppComponents):
    """Render the settings page."""
    engine = components.engine
    backups = components.backups
    st.title("⚙️ Configuración")

    st.markdown("### Apariencia")
    dark = st.toggle("Modo oscuro", value=engine.theme is Theme.DARK)
    if dark != (engine.theme is Theme.DARK):
        engine.toggle_theme()
        st.rerun()

    st.markdown("---")
    st.markdown("### Respaldo")
    export = backups.export_backup()
    st.download_button(
        "📥 Exportar a Excel",
        data=export.data,
        file_name=export.filename,
        mime=export.mime_type,
    )

    uploaded = st.file_uploader("📤 Importar desde Excel", type=["xlsx"])
    if uploaded:
        st.warning("Importar datos desde Excel sobrescribirá los datos existentes.")
        if st.button("Importar y reemplazar", type="primary"):
            try:
                with st.spinner("Importando..."):
                    result = run_async(backups.import_backup(uploaded.getvalue()))
            except StorageError as e:
                st.error(f"No se pudieron guardar los datos importados: {e}")
            else:
                if result.success:
                    st.success(result.message)
                else:
                    st.error(result.message)

    st.markdown("---")
    st.markdown("### Restablecer")
    confirm = st.checkbox(
        "Entiendo que esto eliminará todas mis transacciones, cuentas y categorías."
    )
    if st.button("🗑️ Restablecer datos", disabled=not confirm):
        backups.reset()
        st.success("Datos restablecidos.")
        st.rerun()

    st.markdown("---")
    st.markdown("### Estado de los servicios")
    status = validate_all_settings()
    services = [
        ("Almacenamiento", "storage"),
        ("Google Sheets", "google_sheets"),
        ("Gemini (asistente)", "gemini"),
    ]
    for name, key in services:
        if key not in status:
            continue
        if status[key]:
            st.success(f"✅ {name} - Configurado")
        else:
            error = status.get(f"{key}_error", "No configurado")
            st.error(f"❌ {name} - {error}")

    st.markdown(
        "Para configurar la aplicación, crea un archivo `.env` con tus claves. "
        "Consulta `.env.example` para ver las variables disponibles."
    )


if __name__ == "__main__":
    main()
