import streamlit as st
import asyncio
import pandas as pd

from parkflow.application.services.lot_service import LotService
from parkflow.config.settings_env import settings
from parkflow.infrastructure.persistence.database import AsyncSessionLocal
from parkflow.infrastructure.persistence.sqlalchemy_repositories import (
    SQLAlchemyBusinessAccountRepository,
    SQLAlchemyParkingLotRepository,
)


st.set_page_config(
    page_title="Find Parking",
    page_icon="🗺️",
    layout="wide"
)

st.title("🗺️ Find Parking")


def _lot_service(db):
    return LotService(
        lot_repo=SQLAlchemyParkingLotRepository(db),
        account_repo=SQLAlchemyBusinessAccountRepository(db),
    )


async def search(query):
    async with AsyncSessionLocal() as db:
        return await _lot_service(db).search(query)


async def find_nearby(position):
    async with AsyncSessionLocal() as db:
        return await _lot_service(db).find_nearby(position)


async def suggest(query):
    async with AsyncSessionLocal() as db:
        return await _lot_service(db).suggest(query)


def lot_row(lot, distance_km=None):
    row = {
        "Name": lot.name,
        "Address": lot.address or "",
        "Price / Hour": f"{settings.CURRENCY} {lot.price_per_hour}",
        "Car Slots": f"{lot.available_slots_car} / {lot.total_slots_car}",
        "Bike Slots": f"{lot.available_slots_bike} / {lot.total_slots_bike}",
    }
    if distance_km is not None:
        row["Distance (km)"] = round(distance_km, 2)
    return row


tab1, tab2 = st.tabs(["Search", "Nearby"])

with tab1:
    query = st.text_input("Search by name or address")
    suggestions = asyncio.run(suggest(query))
    if query and suggestions:
        st.caption("Suggestions: " + " · ".join(suggestions))

    result = asyncio.run(search(query))
    if result.focus is not None:
        st.success(f"📍 {result.focus.name}, {result.focus.address or 'no address'}")
        if result.focus.has_position:
            st.map(pd.DataFrame([{"lat": result.focus.latitude, "lon": result.focus.longitude}]))

    if result.lots:
        st.dataframe(pd.DataFrame([lot_row(lot) for lot in result.lots]), use_container_width=True)
    else:
        st.info("No parking lots available")

with tab2:
    col1, col2 = st.columns(2)
    with col1:
        latitude = st.number_input("Your latitude", min_value=-90.0, max_value=90.0, value=27.7172, format="%.6f")
    with col2:
        longitude = st.number_input("Your longitude", min_value=-180.0, max_value=180.0, value=85.3240, format="%.6f")

    ranked = asyncio.run(find_nearby((latitude, longitude)))
    if ranked:
        nearest = ranked[0]
        st.success(f"Nearest: {nearest.lot.name} ({nearest.distance_km:.2f} km)")
        st.dataframe(
            pd.DataFrame([lot_row(r.lot, r.distance_km) for r in ranked]),
            use_container_width=True,
        )
    else:
        st.info("No placed parking lots available")
