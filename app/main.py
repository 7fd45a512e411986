"""
Streamlit Frontend for Table Organizer

The screen people at the table pass around: add what was ordered,
add who is sitting there, tick who shared what, and read off how much
each person owes.

DESIGN PRINCIPLES:
1. Every form is validated before it touches the table
2. Errors are shown next to the form, never swallowed
3. Totals are re-read from the table after every change
"""

import streamlit as st

from table_organizer.config import get_settings, validate_all_settings
from table_organizer.orchestrator import create_table_manager
from table_organizer.services.storage import PersistenceError
from table_organizer.table import DuplicatePersonError, TableManager
from table_organizer.validation import (
    validate_consumable_input,
    validate_person_input,
)


# Page configuration
st.set_page_config(
    page_title="Table Organizer",
    page_icon="🍽️",
    layout="centered",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .big-number {
        font-size: 2.2em;
        font-weight: bold;
        color: #2c3e50;
    }
</style>
""", unsafe_allow_html=True)


@st.cache_resource
def get_table() -> TableManager:
    """Get or create the table session (cached for the process)."""
    return create_table_manager(fall_back_to_memory=True)


def show_issues(result) -> None:
    for issue in result.issues:
        text = issue.message
        if issue.suggested_fix:
            text += f" ({issue.suggested_fix})"
        if issue.severity == "error":
            st.error(text)
        else:
            st.warning(text)


def main():
    """Main application entry point."""
    table = get_table()

    render_sidebar(table)

    consumables_tab, persons_tab = st.tabs(["🧾 Consumables", "👥 Persons"])
    with consumables_tab:
        render_consumables_tab(table)
    with persons_tab:
        render_persons_tab(table)


def render_sidebar(table: TableManager):
    """Tip, totals and the clear button."""
    st.sidebar.title("🍽️ Table Organizer")
    st.sidebar.markdown("---")

    tip = st.sidebar.number_input(
        "Tip (%)",
        min_value=0,
        value=table.tip,
        step=1,
    )
    if tip != table.tip:
        table.set_tip(int(tip))

    summary = table.get_bill_summary()
    st.sidebar.markdown("**Total**")
    st.sidebar.markdown(
        f'<div class="big-number">{table.print_price(summary.total_with_tip)}</div>',
        unsafe_allow_html=True,
    )
    st.sidebar.caption(f"{table.print_price(summary.total)} before tip")

    if summary.unassigned_total:
        st.sidebar.warning(
            f"{table.print_price(summary.unassigned_total)} is not assigned to anyone yet"
        )
    if summary.rounding_loss:
        st.sidebar.info(
            f"{table.print_price(summary.rounding_loss)} is lost to rounding uneven splits"
        )

    st.sidebar.markdown("---")
    if st.sidebar.button("🗑️ Clear table"):
        try:
            table.clear()
            st.rerun()
        except PersistenceError as e:
            st.sidebar.error(f"Could not clear the table: {e}")

    with st.sidebar.expander("Status"):
        status = validate_all_settings()
        for key in ("table", "storage", "logging"):
            if status.get(key, False):
                st.success(f"{key} settings OK")
            else:
                st.error(f"{key}: {status.get(f'{key}_error', 'Not configured')}")
        st.caption(f"Storage backend: {get_settings().storage.backend}")


def render_consumables_tab(table: TableManager):
    """List consumables and the add form."""
    with st.form("add_consumable", clear_on_submit=True):
        name = st.text_input("Name")
        col1, col2 = st.columns(2)
        with col1:
            quantity = st.text_input("Quantity", value="1")
        with col2:
            price = st.text_input("Unit price", placeholder="12.50")
        submitted = st.form_submit_button("Add consumable", type="primary")

    if submitted:
        result = validate_consumable_input(name, quantity, price)
        show_issues(result)
        if result.is_valid:
            draft = result.value
            try:
                table.add_consumable(draft.name, draft.price, draft.quantity)
                st.rerun()
            except PersistenceError as e:
                st.error(f"Could not add consumable: {e}")

    if table.get_number_of_consumables() == 0:
        st.info("Nothing ordered yet. Add the first item above.")
        return

    persons = table.persons
    for consumable in table.consumables:
        consumers = table.consumers_of(consumable)
        header = (
            f"{consumable.quantity} x {consumable.name} - "
            f"{table.print_price(consumable.total_price)}"
        )
        with st.expander(header):
            st.caption(f"Unit price {table.print_price(consumable.price)}")
            if consumers:
                st.caption(
                    f"Split {len(consumers)} ways: "
                    f"{table.print_price(consumable.share_per_person)} each"
                )

            if persons:
                selected = st.multiselect(
                    "Shared by",
                    options=[person.name for person in persons],
                    default=[person.name for person in consumers],
                    key=f"consumers_{consumable.id}",
                )
                if set(selected) != {person.name for person in consumers}:
                    try:
                        for person in persons:
                            if person.name in selected:
                                table.add_consumable_to_person(consumable, person)
                            else:
                                table.remove_consumable_from_person(consumable, person)
                        st.rerun()
                    except PersistenceError as e:
                        st.error(f"Could not update who shared {consumable.name}: {e}")

            if st.button("Remove", key=f"remove_consumable_{consumable.id}"):
                try:
                    table.remove_consumable(consumable.id)
                    st.rerun()
                except PersistenceError as e:
                    st.error(f"Could not remove consumable: {e}")


def render_persons_tab(table: TableManager):
    """List persons with their bill and the add form."""
    with st.form("add_person", clear_on_submit=True):
        name = st.text_input("Name")
        submitted = st.form_submit_button("Add person", type="primary")

    if submitted:
        result = validate_person_input(
            name, {person.name for person in table.persons}
        )
        show_issues(result)
        if result.is_valid:
            try:
                table.add_person(result.value)
                st.rerun()
            except DuplicatePersonError as e:
                st.error(str(e))
            except PersistenceError as e:
                st.error(f"Could not add person: {e}")

    if table.get_number_of_persons() == 0:
        st.info("Nobody at the table yet.")
        return

    for person in table.persons:
        col1, col2, col3 = st.columns([3, 2, 1])
        with col1:
            st.markdown(f"**{person.name}**")
            items = table.consumables_of(person)
            if items:
                st.caption(", ".join(item.name for item in items))
        with col2:
            st.markdown(table.print_price(table.get_personal_bill(person)))
        with col3:
            if st.button("✖", key=f"remove_person_{person.name}"):
                try:
                    table.remove_person(person.name)
                    st.rerun()
                except PersistenceError as e:
                    st.error(f"Could not remove {person.name}: {e}")


if __name__ == "__main__":
    main()
