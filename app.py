"""
Tickerbook - Streamlit Application
Dashboard, stocks, transactions, research notes and settings.
"""

import streamlit as st
import pandas as pd
import logging
from datetime import date
from dotenv import load_dotenv
from pydantic import ValidationError

from config import get_settings
from db_engine import init_db
from services import (
    SUPPORTED_CURRENCIES,
    BusinessRuleError,
    NotFoundError,
    NoteService,
    PortfolioService,
    StockService,
    TransactionService,
    TransactionType,
    UserService,
    calculate_transaction_total,
    format_currency,
)
from services.validation import (
    NoteForm,
    SectorForm,
    StockForm,
    StockWithNoteForm,
    TransactionForm,
    TransactionWithNoteForm,
    UserProfileForm,
)

# Load environment variables
load_dotenv()

logging.basicConfig(
    level=get_settings().log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Configure Streamlit page
st.set_page_config(
    page_title="Tickerbook - Stock Portfolio",
    page_icon="📈",
    layout="wide"
)

# Initialize database
init_db()


# ==================== HELPER FUNCTIONS ====================
def show_error(error: Exception):
    """Display a validation or business-rule error."""
    if isinstance(error, ValidationError):
        for err in error.errors():
            field = ".".join(str(part) for part in err["loc"]) or "form"
            st.error(f"❌ {field}: {err['msg']}")
    else:
        st.error(f"❌ {error}")


def stock_label_map() -> dict:
    """Map "TICKER - Name" labels to stock IDs for select boxes."""
    return {f"{s.ticker} - {s.name}": s.id for s in StockService.list_stocks()}


def transactions_dataframe(transactions, base_currency: str) -> pd.DataFrame:
    """Tabulate transactions with their base-currency totals."""
    tickers = {s.id: s.ticker for s in StockService.list_stocks()}
    return pd.DataFrame([
        {
            'ID': tx.id,
            'Date': tx.transaction_date,
            'Ticker': tickers.get(tx.stock_id, "?"),
            'Type': tx.transaction_type,
            'Quantity': tx.quantity,
            'Price': tx.price,
            'Currency': tx.currency,
            'Rate': tx.exchange_rate,
            'FX Fee': tx.fx_fee,
            f'Total ({base_currency})': round(calculate_transaction_total(tx), 2),
        }
        for tx in transactions
    ])


# ==================== DASHBOARD ====================
def render_dashboard():
    """Render portfolio value, sector breakdown, stock summary and recent activity."""
    summary = PortfolioService.get_summary()
    currency = summary.base_currency

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Portfolio Value", format_currency(summary.total_value, currency))
    with col2:
        st.metric("Stocks", f"{summary.stock_count}")
    with col3:
        st.metric("Transactions", f"{summary.transaction_count}")

    if not summary.positions:
        st.info("No stocks in portfolio. Go to 'Stocks' to add one!")
        return

    col_left, col_right = st.columns(2)

    with col_left:
        st.subheader("🧭 Sector Breakdown")
        sectors_df = PortfolioService.sector_dataframe(summary.sector_breakdown)
        if sectors_df.empty or not summary.total_value:
            st.info("No sector data available")
        else:
            st.bar_chart(sectors_df.set_index('sector')['value'])
            display = sectors_df.copy()
            display['value'] = display['value'].apply(lambda v: format_currency(v, currency))
            display['percentage'] = display['percentage'].map(lambda p: f"{p:.2f}%")
            st.dataframe(display, use_container_width=True, hide_index=True)

    with col_right:
        st.subheader("🕒 Recent Transactions")
        if summary.recent_transactions:
            st.dataframe(
                transactions_dataframe(summary.recent_transactions, currency),
                use_container_width=True, hide_index=True
            )
        else:
            st.info("No transactions recorded.")

    st.subheader("📊 Stock Summary")
    search = st.text_input("Search stocks", placeholder="Ticker or name", key="dashboard_search")
    positions_df = PortfolioService.positions_dataframe(summary.positions)
    if search:
        needle = search.lower()
        mask = (positions_df['ticker'].str.lower().str.contains(needle, regex=False)
                | positions_df['name'].str.lower().str.contains(needle, regex=False))
        positions_df = positions_df[mask]
    st.dataframe(positions_df, use_container_width=True, hide_index=True)


# ==================== STOCKS ====================
def render_stocks():
    """Render stock list with details, and add/edit/delete forms."""
    sectors = StockService.list_sectors()
    sector_options = {"(none)": None, **{s.name: s.id for s in sectors}}
    base_currency = PortfolioService.get_base_currency()

    st.subheader("➕ Add Stock")
    with st.form("add_stock_form"):
        col1, col2 = st.columns(2)
        with col1:
            ticker = st.text_input("Ticker", placeholder="e.g., AAPL")
            name = st.text_input("Company Name", placeholder="e.g., Apple Inc.")
        with col2:
            currency = st.selectbox("Currency", SUPPORTED_CURRENCIES,
                                    index=SUPPORTED_CURRENCIES.index("USD"))
            sector_label = st.selectbox("Sector", list(sector_options.keys()))
        include_note = st.checkbox("Add a research note")
        note_content = st.text_area("Note", max_chars=1000)

        if st.form_submit_button("Add Stock", use_container_width=True):
            try:
                form = StockWithNoteForm(
                    ticker=ticker, name=name, currency=currency,
                    sector_id=sector_options[sector_label],
                    include_note=include_note, note_content=note_content or None,
                )
                stock = StockService.create_stock(form)
                st.success(f"✅ Added {stock.name} ({stock.ticker})!")
                st.rerun()
            except (ValidationError, BusinessRuleError, NotFoundError) as e:
                show_error(e)

    st.subheader("📈 Your Stocks")
    stocks = StockService.list_stocks()
    if not stocks:
        st.info("No stocks yet.")
        return

    for stock in stocks:
        position = PortfolioService.get_stock_position(stock.id)
        with st.expander(f"**{stock.name}** ({stock.ticker}) - {stock.currency}"):
            col1, col2, col3 = st.columns(3)
            with col1:
                st.metric("Holdings", f"{position.holdings:,.4f}")
            with col2:
                st.metric("Average Price", format_currency(position.average_price, base_currency))
            with col3:
                st.metric("Value", format_currency(position.value, base_currency))
            st.caption(f"Sector: {position.sector or 'Uncategorized'}")

            if position.transactions:
                st.dataframe(transactions_dataframe(position.transactions, base_currency),
                             use_container_width=True, hide_index=True)

            for note in NoteService.notes_for_stock(stock.id):
                st.markdown(f"> {note.content}")
                st.caption(note.created_at.strftime('%d %b %Y'))

            with st.form(f"edit_stock_{stock.id}"):
                new_ticker = st.text_input("Ticker", value=stock.ticker)
                new_name = st.text_input("Company Name", value=stock.name)
                new_currency = st.selectbox(
                    "Currency", SUPPORTED_CURRENCIES,
                    index=SUPPORTED_CURRENCIES.index(stock.currency)
                    if stock.currency in SUPPORTED_CURRENCIES else 0
                )
                labels = list(sector_options.keys())
                current = next((k for k, v in sector_options.items() if v == stock.sector_id), "(none)")
                new_sector = st.selectbox("Sector", labels, index=labels.index(current))

                col_save, col_delete = st.columns(2)
                with col_save:
                    save = st.form_submit_button("Save", use_container_width=True)
                with col_delete:
                    delete = st.form_submit_button("🗑️ Delete", use_container_width=True)

                if save:
                    try:
                        StockService.update_stock(stock.id, StockForm(
                            ticker=new_ticker, name=new_name, currency=new_currency,
                            sector_id=sector_options[new_sector],
                        ))
                        st.success("✅ Stock updated!")
                        st.rerun()
                    except (ValidationError, BusinessRuleError, NotFoundError) as e:
                        show_error(e)
                if delete:
                    try:
                        StockService.delete_stock(stock.id)
                        st.success(f"✅ Deleted {stock.ticker}")
                        st.rerun()
                    except (BusinessRuleError, NotFoundError) as e:
                        show_error(e)


# ==================== TRANSACTIONS ====================
def render_transactions():
    """Render transaction history and add/edit/delete forms."""
    stock_options = stock_label_map()
    base_currency = PortfolioService.get_base_currency()

    if not stock_options:
        st.info("Add a stock before recording transactions.")
        return

    st.subheader("➕ Add Transaction")
    with st.form("add_transaction_form"):
        col1, col2 = st.columns(2)
        with col1:
            stock_label = st.selectbox("Stock", list(stock_options.keys()))
            tx_type = st.radio("Type", [t.value for t in TransactionType], horizontal=True)
            quantity = st.number_input("Quantity", min_value=0.0, step=1.0)
            price = st.number_input("Price per Share", min_value=0.0, step=0.01)
        with col2:
            tx_date = st.date_input("Date", value=date.today(), max_value=date.today())
            currency = st.selectbox("Currency", SUPPORTED_CURRENCIES)
            exchange_rate = st.number_input(
                f"Exchange Rate (to {base_currency})", min_value=0.0, value=1.0, step=0.0001,
                format="%.4f", help="Ignored when the currency is your base currency"
            )
            fx_fee = st.number_input(f"FX Fee ({base_currency})", min_value=0.0, step=0.01)
        include_note = st.checkbox("Add a note")
        note_content = st.text_area("Note", max_chars=1000)

        if st.form_submit_button("Add Transaction", use_container_width=True):
            try:
                form = TransactionWithNoteForm(
                    stock_id=stock_options[stock_label],
                    transaction_type=tx_type,
                    quantity=quantity,
                    price=price,
                    transaction_date=tx_date,
                    currency=currency,
                    exchange_rate=exchange_rate or None,
                    fx_fee=fx_fee,
                    include_note=include_note,
                    note_content=note_content or None,
                )
                tx = TransactionService.create_transaction(form)
                st.success(
                    f"✅ Recorded {tx.transaction_type} of {tx.quantity} shares "
                    f"({format_currency(calculate_transaction_total(tx), base_currency)})"
                )
                st.rerun()
            except (ValidationError, BusinessRuleError, NotFoundError) as e:
                show_error(e)

    st.subheader("📜 Transaction History")
    transactions = TransactionService.list_transactions()
    if not transactions:
        st.info("No transactions recorded.")
        return

    st.dataframe(transactions_dataframe(transactions, base_currency),
                 use_container_width=True, hide_index=True)

    st.subheader("✏️ Edit Transaction")
    tx_ids = [tx.id for tx in transactions]
    selected_id = st.selectbox("Transaction ID", tx_ids)
    tx = TransactionService.get_transaction(selected_id)
    labels = list(stock_options.keys())
    current_label = next((k for k, v in stock_options.items() if v == tx.stock_id), labels[0])

    for note in NoteService.notes_for_transaction(tx.id):
        st.markdown(f"> {note.content}")

    with st.form("edit_transaction_form"):
        col1, col2 = st.columns(2)
        with col1:
            stock_label = st.selectbox("Stock", labels, index=labels.index(current_label))
            types = [t.value for t in TransactionType]
            tx_type = st.radio("Type", types, index=types.index(tx.transaction_type), horizontal=True)
            quantity = st.number_input("Quantity", min_value=0.0, value=float(tx.quantity), step=1.0)
            price = st.number_input("Price per Share", min_value=0.0, value=float(tx.price), step=0.01)
        with col2:
            tx_date = st.date_input("Date", value=tx.transaction_date)
            currency = st.selectbox(
                "Currency", SUPPORTED_CURRENCIES,
                index=SUPPORTED_CURRENCIES.index(tx.currency) if tx.currency in SUPPORTED_CURRENCIES else 0
            )
            exchange_rate = st.number_input("Exchange Rate", min_value=0.0,
                                            value=float(tx.exchange_rate or 1.0),
                                            step=0.0001, format="%.4f")
            fx_fee = st.number_input("FX Fee", min_value=0.0, value=float(tx.fx_fee or 0.0), step=0.01)

        col_save, col_delete = st.columns(2)
        with col_save:
            save = st.form_submit_button("Save", use_container_width=True)
        with col_delete:
            delete = st.form_submit_button("🗑️ Delete", use_container_width=True)

        if save:
            try:
                TransactionService.update_transaction(tx.id, TransactionForm(
                    stock_id=stock_options[stock_label],
                    transaction_type=tx_type,
                    quantity=quantity,
                    price=price,
                    transaction_date=tx_date,
                    currency=currency,
                    exchange_rate=exchange_rate or None,
                    fx_fee=fx_fee,
                ))
                st.success("✅ Transaction updated!")
                st.rerun()
            except (ValidationError, BusinessRuleError, NotFoundError) as e:
                show_error(e)
        if delete:
            try:
                TransactionService.delete_transaction(tx.id)
                st.success("✅ Transaction deleted")
                st.rerun()
            except NotFoundError as e:
                show_error(e)


# ==================== NOTES ====================
def render_notes():
    """Render research notes and the add/edit/delete forms."""
    stock_options = {"(none)": None, **stock_label_map()}

    st.subheader("📝 Add Note")
    with st.form("add_note_form"):
        content = st.text_area("Content", max_chars=1000)
        stock_label = st.selectbox("Stock", list(stock_options.keys()))
        if st.form_submit_button("Add Note", use_container_width=True):
            try:
                NoteService.create_note(NoteForm(content=content, stock_id=stock_options[stock_label]))
                st.success("✅ Note added!")
                st.rerun()
            except (ValidationError, NotFoundError) as e:
                show_error(e)

    st.subheader("🗒️ Notes")
    notes = NoteService.list_notes()
    if not notes:
        st.info("No notes yet.")
        return

    labels = list(stock_options.keys())
    for note in notes:
        current = next((k for k, v in stock_options.items() if v == note.stock_id), "(none)")
        with st.expander(f"{note.created_at.strftime('%d %b %Y')} - {current}: {note.content[:60]}"):
            with st.form(f"edit_note_{note.id}"):
                new_content = st.text_area("Content", value=note.content, max_chars=1000)
                new_stock = st.selectbox("Stock", labels, index=labels.index(current))
                col_save, col_delete = st.columns(2)
                with col_save:
                    save = st.form_submit_button("Save", use_container_width=True)
                with col_delete:
                    delete = st.form_submit_button("🗑️ Delete", use_container_width=True)

                if save:
                    try:
                        NoteService.update_note(note.id, NoteForm(
                            content=new_content,
                            stock_id=stock_options[new_stock],
                            transaction_id=note.transaction_id,
                        ))
                        st.success("✅ Note updated!")
                        st.rerun()
                    except (ValidationError, NotFoundError) as e:
                        show_error(e)
                if delete:
                    NoteService.delete_note(note.id)
                    st.rerun()


# ==================== SETTINGS ====================
def render_settings():
    """Render profile, base currency and sector management."""
    user = UserService.get_current_user()

    st.subheader("👤 Profile")
    with st.form("profile_form"):
        name = st.text_input("Name", value=user.name or "")
        email = st.text_input("Email", value=user.email_address or "")
        current = user.default_currency if user.default_currency in SUPPORTED_CURRENCIES else "GBP"
        default_currency = st.selectbox("Base Currency", SUPPORTED_CURRENCIES,
                                        index=SUPPORTED_CURRENCIES.index(current))
        if st.form_submit_button("Save Profile", use_container_width=True):
            try:
                UserService.update_profile(UserProfileForm(
                    name=name, email=email, default_currency=default_currency
                ))
                st.success("✅ Profile saved!")
                st.rerun()
            except ValidationError as e:
                show_error(e)

    st.subheader("🏷️ Sectors")
    with st.form("add_sector_form"):
        sector_name = st.text_input("Sector Name", placeholder="e.g., Technology")
        if st.form_submit_button("Add Sector", use_container_width=True):
            try:
                StockService.create_sector(SectorForm(name=sector_name))
                st.rerun()
            except ValidationError as e:
                show_error(e)

    for sector in StockService.list_sectors():
        col1, col2 = st.columns([4, 1])
        with col1:
            st.write(sector.name)
        with col2:
            if st.button("🗑️", key=f"delete_sector_{sector.id}"):
                StockService.delete_sector(sector.id)
                st.rerun()


# ==================== MAIN APP ====================
def main():
    """Main application entry point."""
    st.title("📈 Tickerbook")
    st.markdown("*Personal stock portfolio and research notes*")

    tab1, tab2, tab3, tab4, tab5 = st.tabs([
        "📊 Dashboard", "📈 Stocks", "💱 Transactions", "📝 Notes", "⚙️ Settings"
    ])

    with tab1:
        render_dashboard()

    with tab2:
        render_stocks()

    with tab3:
        render_transactions()

    with tab4:
        render_notes()

    with tab5:
        render_settings()

    st.markdown("---")
    st.markdown(
        "<div style='text-align: center; color: gray;'>"
        "Values are shown at cost in your base currency.</div>",
        unsafe_allow_html=True
    )


if __name__ == "__main__":
    main()
