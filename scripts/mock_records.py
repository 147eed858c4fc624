"""Write a random people table for trying out the host: config/data/people_large.csv"""
import numpy as np
import pandas as pd
from pathlib import Path

n_rows = 500
rng = np.random.default_rng(7)

first_names = ["Ada", "Grace", "Alan", "Edsger", "Barbara", "Donald", "Frances", "Ken"]
last_names = ["Smith", "Price", "Nguyen", "Okafor", "Larsen", "Silva"]
departments = ["Engineering", "Sales", "Support", "Research"]

start = pd.Timestamp("1960-01-01")
birthdays = start + pd.to_timedelta(rng.integers(0, 365 * 45, size=n_rows), unit="D")
shift_start = pd.Timestamp("2000-01-01 06:00") + pd.to_timedelta(rng.integers(0, 12 * 4, size=n_rows) * 15, unit="m")

frame = pd.DataFrame(
    {
        "firstName": rng.choice(first_names, size=n_rows),
        "lastName": rng.choice(last_names, size=n_rows),
        "age": rng.integers(18, 70, size=n_rows),
        "department": rng.choice(departments, size=n_rows),
        "birthday": birthdays.strftime("%Y-%m-%d"),
        "shiftStart": shift_start.strftime("%H:%M"),
    }
)

out = Path("config/data")
out.mkdir(parents=True, exist_ok=True)
frame.to_csv(out / "people_large.csv", index=False)
print("wrote config/data/people_large.csv", frame.shape)
