import streamlit as st

from parkflow.infrastructure.persistence.database import init_db

# Initialize database on startup
init_db()

st.set_page_config(
    page_title="Parkflow",
    page_icon="🅿️",
    layout="wide"
)

st.write("# 🅿️ Parkflow")

st.write(
    """Welcome to Parkflow, the parking-lot management system.

## Features:

### 🚦 Business Dashboard
- **Vehicle Entry/Exit**: Check vehicles in and out of your lot
- **Live Occupancy**: Car and bike slots in use
- **Checkout & Receipt**: Fare with overage fine, cash or online payment
- **Lot Settings**: Price per hour, capacity, maximum stay and fine

### 🗺️ Find Parking
- Search lots by name or address
- Rank lots by distance from your position

### 🛡️ Admin
- Approve, reject or ban business accounts
- Browse all vehicle records
"""
)
