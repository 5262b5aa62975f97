# barbershop/data.py

BARBERS = ("John", "Mike", "Alex")

# Seed catalog: (name, description, duration minutes, price)
DEFAULT_SERVICES = [
    ("Classic Haircut", "Scissor or clipper cut, wash and style", 45, 35),
    ("Beard Trim", "Shape up and line the beard", 15, 15),
    ("Fade", "Skin or taper fade", 30, 30),
    ("Hot Towel Shave", "Straight razor shave with hot towel", 30, 25),
    ("Cut and Beard", "Haircut with full beard trim", 60, 45),
]

shop_settings = {
    "open_time": "09:00",
    "close_time": "18:00",
    "slot_minutes": 60,
    # bookings may start on any quarter hour
    "booking_step_minutes": 15,
    # 0=Mon ... 5=Sat; closed on Sunday
    "working_days": [0, 1, 2, 3, 4, 5],
}

ACTIVE_STATUSES = ("pending", "confirmed")
