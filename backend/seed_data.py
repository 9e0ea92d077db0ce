"""
Startup fixtures: realistic local encounters for the demo patients and the
fixed prescriptions behind the DEMO-00x pharmacy tokens.
"""

import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List

from local_data import LocalDataStore

logger = logging.getLogger(__name__)

ENCOUNTERS_DATA: List[Dict[str, Any]] = [
    {
        "patientId": 107,
        "diagnosis": "Hypertension Stage 2, Type 2 Diabetes Mellitus",
        "symptoms": "Headache, dizziness, blurred vision, increased thirst",
        "chiefComplaint": "BP check and medication refill",
        "visitType": "Follow-up",
        "notes": "BP: 165/98 mmHg. Random blood sugar: 14.2 mmol/L. Patient reports good medication compliance. Advised lifestyle modifications.",
        "medications": [
            {"name": "Amlodipine", "dosage": "10mg", "frequency": "Once daily", "duration": "30 days"},
            {"name": "Metformin", "dosage": "500mg", "frequency": "Twice daily with meals", "duration": "30 days"},
            {"name": "Lisinopril", "dosage": "20mg", "frequency": "Once daily", "duration": "30 days"},
        ],
    },
    {
        "patientId": 108,
        "diagnosis": "Malaria (Plasmodium falciparum) with Typhoid fever",
        "symptoms": "High fever (39.5°C), severe headache, body aches, vomiting, loss of appetite",
        "chiefComplaint": "High fever for 3 days with severe body pains",
        "visitType": "Emergency",
        "notes": "Rapid diagnostic test positive for Malaria. Widal test positive (O & H antigens). Started on IV fluids. Patient admitted for observation.",
        "medications": [
            {"name": "Artemether-Lumefantrine (Coartem)", "dosage": "80/480mg", "frequency": "Twice daily", "duration": "3 days"},
            {"name": "Ciprofloxacin", "dosage": "500mg", "frequency": "Twice daily", "duration": "7 days"},
            {"name": "Paracetamol", "dosage": "1g", "frequency": "Three times daily as needed", "duration": "5 days"},
        ],
    },
    {
        "patientId": 109,
        "diagnosis": "Peptic Ulcer Disease (H. pylori positive)",
        "symptoms": "Burning epigastric pain, worse at night and empty stomach, occasional nausea",
        "chiefComplaint": "Severe stomach pain for 2 weeks",
        "visitType": "New Visit",
        "notes": "H. pylori stool antigen positive. Endoscopy recommended. Started triple therapy. Advised to avoid NSAIDs and spicy foods.",
        "medications": [
            {"name": "Omeprazole", "dosage": "20mg", "frequency": "Twice daily before meals", "duration": "14 days"},
            {"name": "Amoxicillin", "dosage": "1g", "frequency": "Twice daily", "duration": "14 days"},
            {"name": "Clarithromycin", "dosage": "500mg", "frequency": "Twice daily", "duration": "14 days"},
        ],
    },
    {
        "patientId": 115,
        "diagnosis": "Bronchial Asthma (moderate persistent)",
        "symptoms": "Shortness of breath, wheezing, chest tightness, worse at night",
        "chiefComplaint": "Difficulty breathing especially at night",
        "visitType": "Follow-up",
        "notes": "Peak flow 65% of predicted. Asthma poorly controlled. Reviewed inhaler technique. Advised to avoid triggers (dust, smoke).",
        "medications": [
            {"name": "Salbutamol Inhaler", "dosage": "100mcg", "frequency": "2 puffs every 4-6 hours as needed", "duration": "30 days"},
            {"name": "Beclomethasone Inhaler", "dosage": "200mcg", "frequency": "2 puffs twice daily", "duration": "30 days"},
            {"name": "Montelukast", "dosage": "10mg", "frequency": "Once daily at bedtime", "duration": "30 days"},
        ],
    },
    {
        "patientId": 119,
        "diagnosis": "Rheumatoid Arthritis",
        "symptoms": "Joint pain and stiffness (hands, knees), morning stiffness >1 hour, fatigue",
        "chiefComplaint": "Joint pains and swelling for 6 months",
        "visitType": "Follow-up",
        "notes": "ESR elevated (45mm/hr). RF positive. Joint swelling noted in MCPs and PIPs bilaterally. Continue DMARDs. Refer to physiotherapy.",
        "medications": [
            {"name": "Methotrexate", "dosage": "15mg", "frequency": "Once weekly", "duration": "30 days"},
            {"name": "Folic Acid", "dosage": "5mg", "frequency": "Once daily (except MTX day)", "duration": "30 days"},
            {"name": "Diclofenac", "dosage": "50mg", "frequency": "Twice daily with food", "duration": "14 days"},
            {"name": "Omeprazole", "dosage": "20mg", "frequency": "Once daily", "duration": "30 days"},
        ],
    },
    {
        "patientId": 121,
        "diagnosis": "HIV/AIDS (on antiretroviral therapy), Oral Candidiasis",
        "symptoms": "White patches in mouth, difficulty swallowing, general body weakness",
        "chiefComplaint": "Mouth sores and difficulty eating",
        "visitType": "Follow-up",
        "notes": "CD4 count: 350 cells/mm³. Viral load undetectable. Good ART adherence. Oral thrush diagnosed. Counseling on medication adherence continued.",
        "medications": [
            {"name": "Tenofovir/Lamivudine/Efavirenz (TLE)", "dosage": "300/300/600mg", "frequency": "Once daily at bedtime", "duration": "30 days"},
            {"name": "Fluconazole", "dosage": "200mg", "frequency": "Once daily", "duration": "14 days"},
            {"name": "Multivitamin", "dosage": "1 tablet", "frequency": "Once daily", "duration": "30 days"},
        ],
    },
]

DEMO_PRESCRIPTIONS: List[Dict[str, Any]] = [
    {
        "token": "DEMO-001",
        "patientId": "demo-patient-1",
        "prescription": {
            "patientInitials": "A.O.",
            "patientAge": "45",
            "patientGender": "Male",
            "allergies": ["Penicillin"],
            "medications": [],
            "prescriptionText": (
                "1. Amlodipine 5mg - Once daily in the morning - 30 days\n"
                "   Take with or without food. Monitor blood pressure regularly.\n\n"
                "2. Metformin 500mg - Twice daily with meals - 30 days\n"
                "   Take with food to reduce GI side effects. Monitor blood sugar.\n\n"
                "3. Atorvastatin 20mg - Once daily at bedtime - 30 days\n"
                "   For cholesterol management."
            ),
            "diagnosis": "Hypertension and Type 2 Diabetes",
            "safetyWarnings": ["Patient allergic to Penicillin - avoid all penicillin-based antibiotics"],
            "doctorName": "Dr. Adebayo Oluwaseun, MBBS",
            "notes": "Patient advised on lifestyle modifications: low-salt diet, regular exercise, weight management.",
        },
    },
    {
        "token": "DEMO-002",
        "patientId": "demo-patient-2",
        "prescription": {
            "patientInitials": "C.N.",
            "patientAge": "28",
            "patientGender": "Female",
            "allergies": ["Sulfa drugs"],
            "medications": [],
            "prescriptionText": (
                "1. Artemether-Lumefantrine (Coartem) 80/480mg - Twice daily - 3 days\n"
                "   Complete full course. Take with fatty food for better absorption.\n\n"
                "2. Paracetamol 1000mg - Three times daily as needed - 5 days\n"
                "   For fever and body aches. Do not exceed 4g per day."
            ),
            "diagnosis": "Malaria (confirmed by rapid diagnostic test)",
            "safetyWarnings": ["Patient allergic to Sulfa drugs", "Ensure adequate hydration"],
            "doctorName": "Dr. David Uhumagho, MBBS",
            "notes": "Patient to return if fever persists after 48 hours. Advised bed rest and plenty of fluids.",
        },
    },
    {
        "token": "DEMO-003",
        "patientId": "demo-patient-3",
        "prescription": {
            "patientInitials": "E.M.",
            "patientAge": "65",
            "patientGender": "Female",
            "allergies": [],
            "medications": [],
            "prescriptionText": (
                "1. Lisinopril 10mg - Once daily - 30 days\n"
                "   May cause dry cough. Report if persistent. Monitor blood pressure.\n\n"
                "2. Aspirin 75mg - Once daily after breakfast - 30 days\n"
                "   For cardiovascular protection. Take with food.\n\n"
                "3. Omeprazole 20mg - Once daily before breakfast - 14 days\n"
                "   Take 30 minutes before meals for gastric protection."
            ),
            "diagnosis": "Hypertension with history of gastritis",
            "safetyWarnings": ["Elderly patient - monitor for orthostatic hypotension"],
            "doctorName": "Dr. Adebayo Oluwaseun, MBBS",
            "notes": "Patient counseled on medication compliance and lifestyle changes. Follow-up in 2 weeks.",
        },
    },
]

def create_encounter_with_medications(
    store: LocalDataStore,
    patient_id: Any,
    encounter_fields: Dict[str, Any],
    medications: List[Dict[str, Any]] = None,
    encounter_date: str = None
) -> Dict[str, Any]:
    """Add one local encounter plus a linked local medication per prescribed drug.

    Returns ``{"encounter": ..., "medications": [...]}``. Shared by the
    create-encounter route and startup seeding.
    """
    visit_date = encounter_date or date.today().isoformat()
    encounter = store.add_encounter({
        "patient": patient_id,
        "diagnosis": encounter_fields.get("diagnosis"),
        "symptoms": encounter_fields.get("symptoms"),
        "chief_complaint": encounter_fields.get("chiefComplaint"),
        "visit_type": encounter_fields.get("visitType"),
        "notes": encounter_fields.get("notes"),
        "encounter_date": visit_date,
        "updated_at": datetime.now(timezone.utc).isoformat(),
    })

    created = []
    for med in medications or []:
        created.append(store.add_medication({
            "patient": patient_id,
            "encounter": encounter["id"],
            "encounter_id": encounter["id"],
            "name": med.get("name"),
            "dosage": med.get("dosage"),
            "frequency": med.get("frequency"),
            "duration": med.get("duration"),
            "prescribed_date": visit_date,
            "status": "Active",
        }))

    return {"encounter": encounter, "medications": created}

def seed_local_records(store: LocalDataStore) -> int:
    """Populate the overlay store with the demo encounters; returns the count"""
    count = 0
    for data in ENCOUNTERS_DATA:
        create_encounter_with_medications(store, data["patientId"], data, data["medications"])
        count += 1

    logger.info(f"Seeded {count} local encounters with medications")
    return count
