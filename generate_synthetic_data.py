"""
generate_synthetic_data.py

Synthetic players and bets for driving the betting backend.

Every generator returns plain JSON-ready dicts in the wire format the
API expects:
  - generate_user_data()          registration payload (+ profile fields)
  - generate_login_credentials()  username/password pair
  - generate_bet_data()           legitimate bet (fraud probes mutate a copy)
  - generate_payment_info()       card details for UI deposit flows
  - generate_random_string(n)     alphanumeric filler

Run directly to write a sample batch to synthetic_players.json.

Set BETGUARD_DATA_SEED for reproducible output.
"""
import json
import random
import string
import sys
from datetime import datetime, timezone

from faker import Faker

from config import (
    BASE_DIR, BET_TYPES, DATA_RANDOM_SEED, MARKET_TYPES, SELECTIONS, SPORT_TEAMS,
)
from models import isoformat

fake = Faker()
if DATA_RANDOM_SEED is not None:
    Faker.seed(int(DATA_RANDOM_SEED))
    random.seed(int(DATA_RANDOM_SEED))

SAMPLE_PATH = BASE_DIR / "synthetic_players.json"
ALPHANUMERIC = string.ascii_letters + string.digits


# ─── Players ─────────────────────────────────────────────────────────

def generate_user_data() -> dict:
    """Complete registration payload. Username and email are unique per process."""
    return {
        "firstName": fake.first_name(),
        "lastName": fake.last_name(),
        "email": fake.unique.email(),
        "username": fake.unique.user_name().lower(),
        "password": fake.password(length=12) + "1A!",  # complexity rules
        "dateOfBirth": fake.date_of_birth(minimum_age=18, maximum_age=80).isoformat(),
        "phoneNumber": fake.phone_number(),
        "address": {
            "street": fake.street_address(),
            "city": fake.city(),
            "state": fake.state(),
            "zipCode": fake.zipcode(),
            "country": fake.country(),
        },
    }


def generate_login_credentials(user_data: dict = None) -> dict:
    if user_data:
        return {"username": user_data["username"], "password": user_data["password"]}
    return {
        "username": fake.user_name().lower(),
        "password": fake.password(length=12) + "1A!",
    }


# ─── Bets ────────────────────────────────────────────────────────────

def generate_bet_data() -> dict:
    """
    A legitimate bet: sane odds and amount, current timestamp.

    Odds stay at 2.5 or above so the tenfold odds probe always lands past
    the manipulation threshold.
    """
    sport = random.choice(list(SPORT_TEAMS))
    home_team, away_team = random.sample(SPORT_TEAMS[sport], 2)

    return {
        "matchId": generate_random_string(10).upper(),
        "sport": sport,
        "homeTeam": home_team,
        "awayTeam": away_team,
        "betType": random.choice(BET_TYPES),
        "marketType": random.choice(MARKET_TYPES),
        "selection": random.choice(SELECTIONS),
        "odds": round(2.5 + random.random() * 8.5, 2),
        "amount": random.randint(5, 99),
        "timestamp": isoformat(datetime.now(timezone.utc)),
        "transactionId": fake.uuid4(),
    }


def generate_payment_info() -> dict:
    return {
        "cardType": random.choice(["Visa", "Mastercard", "Amex"]),
        "cardNumber": fake.credit_card_number(),
        "cardExpiry": fake.credit_card_expire(date_format="%Y-%m"),
        "cardCvc": fake.credit_card_security_code(),
        "cardHolder": fake.name(),
    }


def generate_random_string(length: int) -> str:
    if length <= 0:
        return ""
    return "".join(random.choice(ALPHANUMERIC) for _ in range(length))


# ─── Sample batch ────────────────────────────────────────────────────

def generate_players(count: int, bets_per_player: int = 3) -> list:
    return [
        {
            "user": generate_user_data(),
            "bets": [generate_bet_data() for _ in range(bets_per_player)],
            "payment": generate_payment_info(),
        }
        for _ in range(count)
    ]


if __name__ == "__main__":
    count = int(sys.argv[1]) if len(sys.argv) > 1 else 20
    players = generate_players(count)
    with open(SAMPLE_PATH, "w") as f:
        json.dump(players, f, indent=2)
    total_bets = sum(len(p["bets"]) for p in players)
    print(f"Generated {len(players)} players, {total_bets} bets -> {SAMPLE_PATH}")
