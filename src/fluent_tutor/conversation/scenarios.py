"""Predefined roleplay scenarios."""

from fluent_tutor.models.scenario import Difficulty, Scenario

PAGE_SIZE = 6
RECOMMENDED_COUNT = 5


def _scenario(id, title, description, emoji, ai_role, user_role, difficulty, initial_message):
    return Scenario(
        id=id,
        title=title,
        description=description,
        emoji=emoji,
        ai_role=ai_role,
        user_role=user_role,
        difficulty=difficulty,
        initial_message=initial_message,
    )


PREDEFINED_SCENARIOS: list[Scenario] = [
    _scenario(
        "coffee-shop", "Ordering Coffee",
        "Order your favorite drink with specific customizations.",
        "☕", "Barista", "Customer", Difficulty.BEGINNER,
        "Hi! Welcome to Bean & Brew. What can I get started for you today?",
    ),
    _scenario(
        "job-interview", "Job Interview",
        "Answer common questions for a professional role.",
        "💼", "Hiring Manager", "Candidate", Difficulty.ADVANCED,
        "Good morning. Thank you for coming. Could you tell me a little about yourself?",
    ),
    _scenario(
        "airport-checkin", "Airport Check-in",
        "Check in for a flight and ask about luggage.",
        "✈️", "Airline Agent", "Traveler", Difficulty.INTERMEDIATE,
        "Hello! May I see your passport and ticket, please?",
    ),
    _scenario(
        "hotel-complaint", "Hotel Complaint",
        "Politely complain about a noisy room.",
        "🛎️", "Receptionist", "Guest", Difficulty.INTERMEDIATE,
        "Good evening. How can I help you, sir/madam?",
    ),
    _scenario(
        "making-friends", "Making Friends",
        "Casual chat with a stranger at a park.",
        "🌳", "Friendly Stranger", "You", Difficulty.BEGINNER,
        "Beautiful weather today, isn't it? Do you come here often?",
    ),
    _scenario(
        "doctor-visit", "Seeing a Doctor",
        "Describe your symptoms and ask for advice.",
        "🩺", "Doctor", "Patient", Difficulty.INTERMEDIATE,
        "Hello. I see you're not feeling well today. What seems to be the problem?",
    ),
    _scenario(
        "shopping-clothes", "Buying Clothes",
        "Ask for sizes and try on different items.",
        "👕", "Shop Assistant", "Shopper", Difficulty.BEGINNER,
        "Hi there! Let me know if you need help finding a specific size.",
    ),
    _scenario(
        "asking-directions", "Asking Directions",
        "You are lost. Ask a local for help.",
        "🗺️", "Local Resident", "Tourist", Difficulty.BEGINNER,
        "Excuse me? You look a bit lost. Can I help you find something?",
    ),
    _scenario(
        "restaurant-order", "Dinner Reservation",
        "Book a table and ask about the menu.",
        "🍽️", "Host", "Customer", Difficulty.INTERMEDIATE,
        "Good evening, welcome to La Luna. Do you have a reservation?",
    ),
    _scenario(
        "rent-apartment", "Renting a Flat",
        "Ask a landlord about rent, utilities, and rules.",
        "🏠", "Landlord", "Tenant", Difficulty.ADVANCED,
        "Hi! Thanks for coming to view the apartment. What do you think of the space?",
    ),
    _scenario(
        "grocery-store", "Supermarket",
        "Checkout groceries and ask for a bag.",
        "🛒", "Cashier", "Customer", Difficulty.BEGINNER,
        "Hello! Did you find everything you were looking for today?",
    ),
    _scenario(
        "tech-support", "IT Support",
        "Explain a problem with your laptop.",
        "💻", "Tech Support", "User", Difficulty.INTERMEDIATE,
        "Tech Support, this is Sarah. What issue are you experiencing with your device?",
    ),
    _scenario(
        "haircut", "Getting a Haircut",
        "Explain the hairstyle you want.",
        "✂️", "Barber", "Customer", Difficulty.INTERMEDIATE,
        "Hey! Take a seat. What are we doing with your hair today?",
    ),
    _scenario(
        "refund-item", "Returning Item",
        "Return a defective product for a refund.",
        "📦", "Customer Service", "Customer", Difficulty.ADVANCED,
        "Customer Service. Do you have your receipt with you?",
    ),
    _scenario(
        "taxi-ride", "Taxi Ride",
        "Give directions and chat with the driver.",
        "🚖", "Driver", "Passenger", Difficulty.BEGINNER,
        "Hop in! Where are we heading to today?",
    ),
]

_BY_ID = {s.id: s for s in PREDEFINED_SCENARIOS}


def get_scenario(scenario_id: str) -> Scenario | None:
    return _BY_ID.get(scenario_id)


def page(offset: int = 0, limit: int = PAGE_SIZE) -> list[Scenario]:
    """Next batch for incremental loading; empty once exhausted."""
    return PREDEFINED_SCENARIOS[max(offset, 0):max(offset, 0) + limit]


def recommended(count: int = RECOMMENDED_COUNT) -> list[Scenario]:
    return PREDEFINED_SCENARIOS[:count]
