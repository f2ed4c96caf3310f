import streamlit as st
import asyncio
from datetime import datetime, timezone
import pandas as pd

from parkflow.application.services.booking_service import BookingService
from parkflow.application.services.lot_service import LotService
from parkflow.config.settings_env import settings
from parkflow.domain.common import BillingMode, PaymentMethod, VehicleType
from parkflow.domain.exceptions import ParkflowError
from parkflow.domain.fare import format_duration
from parkflow.infrastructure.persistence.change_feed import change_feed
from parkflow.infrastructure.persistence.database import AsyncSessionLocal
from parkflow.infrastructure.persistence.sqlalchemy_repositories import (
    SQLAlchemyBookingRepository,
    SQLAlchemyBusinessAccountRepository,
    SQLAlchemyParkingLotRepository,
)


st.set_page_config(
    page_title="Business Dashboard",
    page_icon="🚦",
    layout="wide"
)

st.title("🚦 Business Dashboard")


def _booking_service(db):
    return BookingService(
        lot_repo=SQLAlchemyParkingLotRepository(db, change_feed),
        booking_repo=SQLAlchemyBookingRepository(db, change_feed),
        account_repo=SQLAlchemyBusinessAccountRepository(db, change_feed),
    )


def _lot_service(db):
    return LotService(
        lot_repo=SQLAlchemyParkingLotRepository(db, change_feed),
        account_repo=SQLAlchemyBusinessAccountRepository(db, change_feed),
    )


async def get_lot(owner_id):
    async with AsyncSessionLocal() as db:
        return await _lot_service(db).get_lot_for_owner(owner_id)


async def get_occupancy(lot_id):
    async with AsyncSessionLocal() as db:
        return await _booking_service(db).get_occupancy(lot_id)


async def get_active_bookings(lot_id, search):
    async with AsyncSessionLocal() as db:
        return await _booking_service(db).get_active_bookings(lot_id, search)


async def register_entry(lot_id, vehicle_number, vehicle_type, owner_name):
    async with AsyncSessionLocal() as db:
        return await _booking_service(db).register_entry(lot_id, vehicle_number, vehicle_type, owner_name)


async def preview_checkout(booking_id):
    async with AsyncSessionLocal() as db:
        return await _booking_service(db).preview_checkout(booking_id)


async def checkout(booking_id, payment_method):
    async with AsyncSessionLocal() as db:
        return await _booking_service(db).checkout(booking_id, payment_method=payment_method)


async def update_settings(lot_id, **changes):
    async with AsyncSessionLocal() as db:
        return await _lot_service(db).update_settings(lot_id, **changes)


owner_id = st.sidebar.number_input("Business account ID", min_value=1, step=1)

try:
    lot = asyncio.run(get_lot(int(owner_id)))
except ParkflowError as e:
    st.error(f"❌ {e}")
    st.stop()

occupancy = asyncio.run(get_occupancy(lot.id))

col1, col2, col3 = st.columns(3)
with col1:
    st.metric("Car Slots Occupied", f"{occupancy['car']['occupied']} / {occupancy['car']['total']}")
with col2:
    st.metric("Bike Slots Occupied", f"{occupancy['bike']['occupied']} / {occupancy['bike']['total']}")
with col3:
    st.metric("Price / Hour", f"{settings.CURRENCY} {lot.price_per_hour}")

tab1, tab2, tab3 = st.tabs(["Vehicles", "Checkout", "Settings"])

with tab1:
    col1, col2 = st.columns([1, 2])

    with col1:
        st.subheader("Vehicle Entry")
        with st.form("entry_form"):
            vehicle_number = st.text_input("Plate No.", placeholder="BA 1 PA 1234")
            vehicle_type = st.selectbox("Type", options=[e.value for e in VehicleType])
            owner_name = st.text_input("Owner Name (optional)")

            if st.form_submit_button("Register Entry", type="primary"):
                if vehicle_number:
                    try:
                        booking = asyncio.run(register_entry(lot.id, vehicle_number, vehicle_type, owner_name))
                        st.success(f"✅ {booking.vehicle_number} checked in")
                        st.rerun()
                    except ParkflowError as e:
                        st.error(f"❌ {e}")
                else:
                    st.error("Please enter the plate number")

    with col2:
        st.subheader("Active Vehicles")
        search = st.text_input("Search Plate No...", key="plate_search")
        bookings = asyncio.run(get_active_bookings(lot.id, search))

        if bookings:
            now = datetime.now(timezone.utc)
            st.dataframe(pd.DataFrame([
                {
                    "Booking": b.id,
                    "Plate No.": b.vehicle_number,
                    "Type": b.vehicle_type.value,
                    "Entry Time": b.entry_time.strftime("%Y-%m-%d %H:%M"),
                    "Duration": f"{(now - b.entry_time).total_seconds() / 3600:.1f}h",
                }
                for b in bookings
            ]), use_container_width=True)
        else:
            st.info("No vehicles currently parked")

with tab2:
    st.subheader("Exit / Pay")
    booking_id = st.number_input("Booking ID", min_value=1, step=1)

    try:
        booking, booking_lot, quote = asyncio.run(preview_checkout(int(booking_id)))
    except ParkflowError as e:
        st.info(str(e))
    else:
        if booking_lot.id != lot.id:
            st.error(f"❌ Booking {booking.id} belongs to another parking lot")
        else:
            st.write(f"**Vehicle Number:** {booking.vehicle_number}")
            if booking.owner_name:
                st.write(f"**Owner Name:** {booking.owner_name}")
            st.write(f"**Duration:** {format_duration(quote.duration_minutes)}")
            st.write(f"**Rate:** {settings.CURRENCY} {booking_lot.price_per_hour} / hour")
            if quote.exceeded:
                st.warning(
                    f"⚠️ Fine (Exceeded {booking_lot.max_duration_hours}h): {settings.CURRENCY} {quote.fine_applied}"
                )
            st.metric("TOTAL AMOUNT", f"{settings.CURRENCY} {quote.display_total:.2f}")

            payment_method = st.selectbox("Payment Method", options=[e.value for e in PaymentMethod])
            if st.button("Confirm Payment", type="primary"):
                try:
                    completed, _ = asyncio.run(checkout(booking.id, PaymentMethod(payment_method)))
                    st.success(
                        f"✅ {completed.vehicle_number} checked out. "
                        f"Paid {settings.CURRENCY} {completed.total_amount:.2f}"
                    )
                except ParkflowError as e:
                    st.error(f"❌ {e}")

with tab3:
    st.subheader("Lot Settings")
    with st.form("settings_form"):
        price_per_hour = st.number_input("Price / Hour", min_value=0.0, value=float(lot.price_per_hour))
        total_slots_car = st.number_input("Car Slots", min_value=0, value=lot.total_slots_car)
        total_slots_bike = st.number_input("Bike Slots", min_value=0, value=lot.total_slots_bike)
        max_duration = st.number_input("Max Duration (hours)", min_value=0.5, value=float(lot.max_duration_hours))
        fine_amount = st.number_input("Fine Amount", min_value=0.0, value=float(lot.fine_amount))
        modes = [e.value for e in BillingMode]
        billing_mode = st.selectbox("Billing Mode", options=modes, index=modes.index(lot.billing_mode.value))

        if st.form_submit_button("Save Settings"):
            try:
                asyncio.run(update_settings(
                    lot.id,
                    price_per_hour=price_per_hour,
                    total_slots_car=int(total_slots_car),
                    total_slots_bike=int(total_slots_bike),
                    max_duration_hours=max_duration,
                    fine_amount=fine_amount,
                    billing_mode=BillingMode(billing_mode),
                ))
                st.success("✅ Settings saved")
                st.rerun()
            except ParkflowError as e:
                st.error(f"❌ {e}")
