from __future__ import annotations

from pathlib import Path

import pytest

SAMPLE_ROWS = [
    "Customer_ID,Gender,Married,Dependents,Education,Self_Employed,Applicant_Income,"
    "Coapplicant_Income,Loan_Amount,Loan_Amount_Term,Credit_History,Property_Area,Loan_Status",
    "LP001,Male,No,0,Graduate,No,5849,0,,360,1,Urban,Y",
    "LP002,Male,Yes,1,Graduate,No,4583,1508,128,360,1,Rural,N",
    "LP003,Male,Yes,0,Graduate,Yes,3000,0,66,360,1,Urban,Y",
    "LP004,Female,No,0,Not Graduate,No,2583,2358,120,360,0,Urban,N",
    "LP005,Male,No,0,Graduate,No,6000,0,141,360,1,Semiurban,Y",
    "LP006,Female,Yes,2,Not Graduate,No,81000,0,267,360,,Rural,Y",
    "LP007,,Yes,0,Graduate,No,,,95,360,1,Semiurban,",
]


@pytest.fixture
def loan_csv(tmp_path: Path) -> Path:
    csv_path = tmp_path / "loans.csv"
    csv_path.write_text("\n".join(SAMPLE_ROWS) + "\n", encoding="utf-8")
    return csv_path
