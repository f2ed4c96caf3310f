import streamlit as st
import asyncio
import pandas as pd

from parkflow.application.services.admin_service import AdminService
from parkflow.domain.common import BusinessStatus
from parkflow.domain.exceptions import ParkflowError
from parkflow.infrastructure.persistence.change_feed import change_feed
from parkflow.infrastructure.persistence.database import AsyncSessionLocal
from parkflow.infrastructure.persistence.sqlalchemy_repositories import (
    SQLAlchemyBookingRepository,
    SQLAlchemyBusinessAccountRepository,
    SQLAlchemyParkingLotRepository,
)


st.set_page_config(
    page_title="Admin",
    page_icon="🛡️",
    layout="wide"
)

st.title("🛡️ Admin")


def _admin_service(db):
    return AdminService(
        account_repo=SQLAlchemyBusinessAccountRepository(db, change_feed),
        lot_repo=SQLAlchemyParkingLotRepository(db, change_feed),
        booking_repo=SQLAlchemyBookingRepository(db, change_feed),
    )


async def get_stats():
    async with AsyncSessionLocal() as db:
        return await _admin_service(db).get_stats()


async def list_businesses(status):
    async with AsyncSessionLocal() as db:
        return await _admin_service(db).list_businesses(status)


async def update_status(account_id, status):
    async with AsyncSessionLocal() as db:
        return await _admin_service(db).update_status(account_id, status)


async def list_vehicle_records():
    async with AsyncSessionLocal() as db:
        return await _admin_service(db).list_vehicle_records()


stats = asyncio.run(get_stats())
col1, col2, col3 = st.columns(3)
with col1:
    st.metric("Total Biz", stats["total"])
with col2:
    st.metric("Pending", stats["pending"])
with col3:
    st.metric("Active", stats["approved"])

tab1, tab2 = st.tabs(["Management", "All Vehicle Records"])

with tab1:
    filter_options = ["all"] + [e.value for e in BusinessStatus]
    selected = st.radio("Filter", filter_options, horizontal=True)
    status_filter = None if selected == "all" else BusinessStatus(selected)

    businesses = asyncio.run(list_businesses(status_filter))
    if businesses:
        st.dataframe(pd.DataFrame([
            {
                "ID": b.id,
                "Business": b.business_name,
                "Owner": b.full_name or "N/A",
                "Email": b.email,
                "License": b.license_id,
                "Proof": b.proof_doc_url,
                "Status": b.status.value,
            }
            for b in businesses
        ]), use_container_width=True)

        with st.form("status_form"):
            account_id = st.selectbox("Business", options=[b.id for b in businesses])
            new_status = st.selectbox("New status", options=[e.value for e in BusinessStatus])
            if st.form_submit_button("Update Status", type="primary"):
                try:
                    account = asyncio.run(update_status(account_id, BusinessStatus(new_status)))
                    st.success(f"✅ {account.business_name} is now {account.status.value}")
                    st.rerun()
                except ParkflowError as e:
                    st.error(f"❌ {e}")
    else:
        st.info("No businesses found")

with tab2:
    records = asyncio.run(list_vehicle_records())
    if records:
        st.dataframe(pd.DataFrame(records), use_container_width=True)
    else:
        st.info("No vehicle records yet")
