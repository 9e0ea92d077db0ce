"""
Rule-based clinical helpers

Deterministic keyword and regex logic used when no text generator answers,
plus the prescription recommender and note analyzer that never call one.
Nothing here is clinically validated; it only keeps the screens useful
offline.
"""

import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()

def _parse_age(value: Any) -> Optional[int]:
    match = re.match(r"\s*(\d+)", str(value)) if value is not None else None
    return int(match.group(1)) if match else None

def _allergy_list(allergies: Any) -> List[str]:
    if isinstance(allergies, list):
        return [str(a) for a in allergies if a]
    if isinstance(allergies, str) and allergies.strip():
        return [allergies.strip()]
    return []

# Medication safety

def rule_based_safety_check(patient: Dict[str, Any], medications: List[Dict[str, Any]]) -> Dict[str, Any]:
    alerts = []
    risk_score = "Low"

    if len(medications) >= 5:
        alerts.append("⚠️ Polypharmacy detected (5+ medications). Increased risk of interactions.")
        risk_score = "Medium"

    allergies = _allergy_list(patient.get("allergies"))
    if allergies:
        alerts.append(f"⚠️ Patient has documented allergies: {', '.join(allergies)}")

    age = _parse_age(patient.get("age"))
    if age is not None:
        if age >= 65:
            alerts.append("⚠️ Elderly patient - review dosages for age-appropriate adjustments.")
            risk_score = "Medium"
        if age < 18:
            alerts.append("⚠️ Pediatric patient - ensure pediatric dosing guidelines followed.")
            risk_score = "Medium"

    return {
        "success": True,
        "riskScore": risk_score,
        "analysis": "\n".join(alerts),
        "source": "rule-based",
        "recommendations": [
            "Review all medication dosages",
            "Check for drug-drug interactions",
            "Monitor for adverse effects",
        ],
        "timestamp": _now_iso(),
    }

# Patient summary

def intelligent_summary(
    patient: Dict[str, Any],
    encounters: List[Dict[str, Any]],
    medications: List[Dict[str, Any]]
) -> Dict[str, Any]:
    summary = []
    age = _parse_age(patient.get("age")) or 0
    recent = encounters[0] if encounters else None

    if recent:
        diagnosis = (recent.get("diagnosis") or "").lower()

        if "malaria" in diagnosis:
            summary.append("🦟 Active malaria diagnosis - ensure completing full Coartem course, monitor for complications.")
        elif "typhoid" in diagnosis:
            summary.append("🌡️ Typhoid fever - monitor temperature, ensure adequate hydration, complete antibiotic course.")
        elif "hiv" in diagnosis or "aids" in diagnosis:
            summary.append("💊 HIV/AIDS patient - check ART adherence, and monitor CD4 count and viral load regularly.")

        if "hypertension" in diagnosis:
            summary.append("🩺 Hypertension - monitor BP regularly, enforce lifestyle modifications, ensure medication adherence.")
        if "diabetes" in diagnosis:
            summary.append("🩸 Diabetes - monitor blood sugar, screen for complications (kidney, eye, foot), and provide diet counseling.")
        if "asthma" in diagnosis:
            summary.append("💨 Asthma - review inhaler technique, avoid triggers, ensure patient has a rescue inhaler.")

    if len(medications) >= 5:
        summary.append(
            f"⚠️ Polypharmacy alert: {len(medications)} active medications - review for interactions and necessity."
        )

    if age >= 65:
        summary.append("👴 Elderly patient - adjust doses for renal function, monitor for falls risk and side effects.")
    elif 0 < age < 18:
        summary.append("👶 Pediatric patient - ensure age-appropriate dosing, growth monitoring, and immunization status.")

    allergies = _allergy_list(patient.get("allergies"))
    if allergies:
        summary.append(f"⚠️ ALLERGY ALERT: {', '.join(allergies)} - verify all prescriptions before dispensing.")

    if len(encounters) > 3:
        summary.append(
            f"📊 Frequent visits ({len(encounters)} encounters) - consider underlying chronic disease or adherence issues."
        )

    if not summary:
        summary.append("✓ No immediate red flags identified.")
        summary.append(f"Active medications: {len(medications)} - review for adherence and effectiveness.")
        if recent and recent.get("diagnosis"):
            summary.append(f"Recent diagnosis: {recent['diagnosis']} - monitor progress and schedule follow-up.")

    return {
        "success": True,
        "summary": "\n\n".join(summary),
        "source": "rule-based",
        "timestamp": _now_iso(),
    }

# Copilot chat

TRANSLATION_HELP = """I can help translate medical terms.

Examples:

**Yoruba**
- "Orí fífọ́" = Headache
- "Ikùn rírun" = Stomach pain
- "Ibà" = Fever

**Igbo**
- "Isi mgbu" = Headache
- "Afọ mgbu" = Stomach pain
- "Ahụ ọkụ" = Fever

**Hausa**
- "Ciwon kai" = Headache
- "Ciwon ciki" = Stomach pain
- "Zazzabi" = Fever

**Pidgin**
- "Head dey pain" = Headache
- "Belle dey pain" = Stomach pain
- "Hot body" = Fever

What specific term do you need translated?"""

MALARIA_HELP = """**Malaria management (Nigeria context)**

- First-line: Artemether-Lumefantrine (Coartem)
- Monitor for severe anemia, cerebral malaria, persistent high fever
- Counsel patient to complete full course and use bed nets.

Need dosing or interaction advice?"""

GENERAL_HELP = """I'm here to help with:
- 💊 Medication questions (dosing, interactions, side effects)
- 🌍 Nigerian disease management (malaria, typhoid, HIV, hypertension, diabetes)
- 🗣️ Translations (Yoruba, Igbo, Hausa, Pidgin)
- 📋 Practical clinical guidance and safety alerts.

How can I assist you today?"""

def rule_based_chat_response(message: str) -> Dict[str, Any]:
    lowered = message.lower()

    if any(word in lowered for word in ("translate", "yoruba", "igbo", "hausa")):
        response = TRANSLATION_HELP
    elif "malaria" in lowered:
        response = MALARIA_HELP
    else:
        response = GENERAL_HELP

    return {
        "success": True,
        "response": response,
        "source": "rule-based",
        "timestamp": _now_iso(),
    }

# Prescription recommendation

def _recommend(medication, dosage, frequency, duration, instructions) -> Dict[str, str]:
    return {
        "medication": medication,
        "dosage": dosage,
        "frequency": frequency,
        "duration": duration,
        "instructions": instructions,
    }

def generate_prescription_recommendation(patient_info: str) -> str:
    """Plain-text prescription suggestion built from 'Age:', 'Allergies:' and 'Diagnosis:' lines"""
    info = patient_info.lower()

    age_match = re.search(r"age[:\s]*(\d+)", info) or re.search(r"(\d+)\s*years", info)
    age = int(age_match.group(1)) if age_match else None
    allergy_match = re.search(r"allergies?[:\s]*([^\n]+)", info)
    allergies = allergy_match.group(1) if allergy_match else ""
    diagnosis_match = re.search(r"diagnosis[:\s]*([^\n]+)", info)
    diagnosis = diagnosis_match.group(1) if diagnosis_match else ""

    recommendations = []
    safety_warnings = []

    if allergies:
        safety_warnings.append(f"⚠️ PATIENT ALLERGIC TO: {allergies.upper()}")
        safety_warnings.append("Verify all medications for potential cross-allergies before prescribing")

    if "hypertension" in diagnosis or "high blood pressure" in diagnosis:
        recommendations.append(_recommend(
            "Amlodipine", "5mg", "Once daily in the morning", "30 days",
            "Take with or without food. Monitor blood pressure regularly."
        ))
        if "ace" not in allergies:
            recommendations.append(_recommend(
                "Lisinopril", "10mg", "Once daily", "30 days",
                "May cause dry cough. Report if persistent."
            ))

    if ("diabetes" in diagnosis or "sugar" in diagnosis) and "metformin" not in allergies:
        recommendations.append(_recommend(
            "Metformin", "500mg", "Twice daily with meals", "30 days",
            "Take with food to reduce GI side effects. Monitor blood sugar."
        ))

    if "malaria" in diagnosis:
        recommendations.append(_recommend(
            "Artemether-Lumefantrine (Coartem)", "80/480mg", "Twice daily", "3 days",
            "Complete full course. Take with fatty food for better absorption."
        ))

    if any(word in diagnosis for word in ("fever", "pain", "headache")):
        if "paracetamol" not in allergies and "acetaminophen" not in allergies:
            recommendations.append(_recommend(
                "Paracetamol", "1000mg", "Three times daily as needed", "5 days",
                "Do not exceed 4g per day. Take with food if stomach upset occurs."
            ))

    if "infection" in diagnosis or "bacterial" in diagnosis:
        if "penicillin" not in allergies and "amoxicillin" not in allergies:
            recommendations.append(_recommend(
                "Amoxicillin", "500mg", "Three times daily", "7 days",
                "Complete full course even if symptoms improve. Take with food."
            ))
        else:
            recommendations.append(_recommend(
                "Azithromycin", "500mg", "Once daily", "3 days",
                "Alternative for penicillin allergy. Take 1 hour before or 2 hours after meals."
            ))

    if "asthma" in diagnosis or "wheezing" in diagnosis:
        recommendations.append(_recommend(
            "Salbutamol Inhaler", "100mcg per puff", "2 puffs as needed", "30 days",
            "Use for acute symptoms. Rinse mouth after use."
        ))

    if any(word in diagnosis for word in ("ulcer", "gastritis", "stomach")):
        recommendations.append(_recommend(
            "Omeprazole", "20mg", "Once daily before breakfast", "14 days",
            "Take 30 minutes before meals for best effect."
        ))

    lines = ["", "📋 AI PRESCRIPTION RECOMMENDATIONS", "━" * 33, ""]

    if safety_warnings:
        lines.append("⚠️ SAFETY WARNINGS:")
        lines.extend(f"• {warning}" for warning in safety_warnings)
        lines.append("")

    if recommendations:
        lines.append("💊 RECOMMENDED MEDICATIONS:")
        lines.append("")
        for index, med in enumerate(recommendations, start=1):
            lines.extend([
                f"{index}. {med['medication']}",
                f"   • Dosage: {med['dosage']}",
                f"   • Frequency: {med['frequency']}",
                f"   • Duration: {med['duration']}",
                f"   • Instructions: {med['instructions']}",
                "",
            ])
    else:
        lines.append("⚠️ No specific medications recommended based on current information.")
        lines.append("Please provide more details about the diagnosis for better recommendations.")
        lines.append("")

    lines.extend([
        "",
        "📌 GENERAL ADVICE:",
        "• Complete full course of all medications",
        "• Follow up in 1 week or if symptoms worsen",
        "• Stay hydrated and get adequate rest",
        "• Report any adverse reactions immediately",
    ])
    if age is not None and age > 60:
        lines.append("• Consider dose adjustment for elderly patient")

    lines.append("")
    lines.append("⚕️ This is an AI-generated recommendation. Please review and adjust based on clinical judgment.")
    return "\n".join(lines) + "\n"

# Clinical note analysis

def _extract_diagnosis(lower: str) -> str:
    if "fever" in lower and "headache" in lower:
        return "Upper Respiratory Tract Infection (URTI)"
    if any(word in lower for word in ("hypertension", "high bp", "high blood pressure")):
        return "Hypertension"
    if "diabetes" in lower or "high sugar" in lower:
        return "Type 2 Diabetes Mellitus"
    if "malaria" in lower:
        return "Malaria (suspected)"
    if "typhoid" in lower:
        return "Typhoid fever (suspected)"
    if "asthma" in lower or "wheezing" in lower:
        return "Bronchial Asthma"
    if "ulcer" in lower or "stomach pain" in lower:
        return "Peptic Ulcer Disease"
    return "Condition requiring further investigation"

def _treatment_plan(lower: str) -> str:
    plan = []
    if "fever" in lower:
        plan.append("Antipyretics for fever management")
    if "pain" in lower:
        plan.append("Analgesics as needed")
    if "hypertension" in lower or "high bp" in lower:
        plan.extend(["Lifestyle modifications (diet, exercise)", "Regular BP monitoring"])
    if "diabetes" in lower:
        plan.extend(["Blood sugar monitoring", "Dietary counseling"])
    if "malaria" in lower:
        plan.extend(["Complete antimalarial course", "Rest and hydration"])
    plan.extend(["Follow-up in 1 week", "Advise patient on warning signs"])
    return "\n• ".join(plan)

def _suggested_medications(lower: str) -> List[Dict[str, str]]:
    meds = []
    if any(word in lower for word in ("fever", "pain", "headache")):
        meds.append({"name": "Paracetamol", "dosage": "1g", "frequency": "Three times daily", "duration": "5 days"})
    if "malaria" in lower:
        meds.append({"name": "Artemether-Lumefantrine (Coartem)", "dosage": "80/480mg", "frequency": "Twice daily", "duration": "3 days"})
    if "hypertension" in lower or "high bp" in lower:
        meds.append({"name": "Amlodipine", "dosage": "5mg", "frequency": "Once daily", "duration": "30 days"})
    if "diabetes" in lower:
        meds.append({"name": "Metformin", "dosage": "500mg", "frequency": "Twice daily with meals", "duration": "30 days"})
    if "asthma" in lower or "wheezing" in lower:
        meds.append({"name": "Salbutamol Inhaler", "dosage": "100mcg", "frequency": "2 puffs as needed", "duration": "30 days"})
    if "ulcer" in lower or "stomach" in lower:
        meds.append({"name": "Omeprazole", "dosage": "20mg", "frequency": "Once daily before meals", "duration": "14 days"})
    return meds

def _severity(lower: str) -> str:
    if any(word in lower for word in ("severe", "emergency", "critical")):
        return "high"
    if "moderate" in lower or "worsening" in lower:
        return "medium"
    return "low"

def _recommendations(lower: str) -> List[str]:
    recs = []
    if "fever" in lower:
        recs.extend(["Monitor temperature daily", "Ensure adequate hydration"])
    if "hypertension" in lower or "diabetes" in lower:
        recs.extend(["Regular monitoring required", "Lifestyle modifications essential"])
    if "malaria" in lower or "typhoid" in lower:
        recs.extend(["Complete full course of medication", "Return if symptoms persist after 3 days"])
    recs.extend(["Avoid self-medication", "Keep all follow-up appointments"])
    return recs

def analyze_clinical_notes(notes: str) -> Dict[str, Any]:
    lower = notes.lower()
    return {
        "diagnosis": _extract_diagnosis(lower),
        "treatmentPlan": _treatment_plan(lower),
        "suggestedMedications": _suggested_medications(lower),
        "severity": _severity(lower),
        "recommendations": _recommendations(lower),
    }

# Free-text patient parsing

NAME_PATTERNS = [
    re.compile(r"(?:name is |patient |named |called |patient:?\s*)([A-Z][a-z]+(?:\s+[A-Z][a-z]+)+)", re.IGNORECASE),
    re.compile(r"^([A-Z][a-z]+\s+[A-Z][a-z]+)"),
    re.compile(r"([A-Z][a-z]+\s+[A-Z][a-z]+)(?:\s*,?\s*\d+\s*years?)", re.IGNORECASE),
]

AGE_PATTERNS = [
    re.compile(r"(\d+)\s*(?:years? old|yo|yrs?)", re.IGNORECASE),
    re.compile(r"age[:\s]*(\d+)", re.IGNORECASE),
    re.compile(r"(\d+)\s*years?", re.IGNORECASE),
]

PHONE_PATTERNS = [
    re.compile(r"(?:phone|number|tel|contact|mobile|cell)[:\s]*([+\d\s()-]+)", re.IGNORECASE),
    re.compile(r"(\+?\d{3,4}[\s-]?\d{3,4}[\s-]?\d{3,4})"),
    re.compile(r"(0\d{3}\s?\d{3}\s?\d{4})"),
]

ALLERGY_PATTERNS = [
    re.compile(r"(?:allerg(?:y|ies|ic)\s*(?:to)?)[:\s]*([a-z,\s]+?)(?:\.|,|\n|$)", re.IGNORECASE),
    re.compile(r"allergic to ([^.,\n]+)", re.IGNORECASE),
]

DIAGNOSIS_PATTERNS = [
    re.compile(r"(?:diagnosis|diagnosed with|condition)[:\s]*([^.,\n]+)", re.IGNORECASE),
    re.compile(r"(?:suffering from|has)[:\s]*([^.,\n]+)", re.IGNORECASE),
]

MEDICATION_PATTERNS = [
    re.compile(r"(?:medication|medicine|drug|taking|prescribed)[:\s]*([^.,\n]+)", re.IGNORECASE),
]

def _first_match(patterns, text: str) -> Optional[str]:
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return match.group(1).strip()
    return None

def parse_patient_text(text: str) -> Dict[str, Any]:
    """Pull demographic and clinical fields out of a free-text note"""
    parsed: Dict[str, Any] = {}
    lower = text.lower()

    for pattern in NAME_PATTERNS:
        match = pattern.search(text)
        if match:
            parts = match.group(1).strip().split()
            if len(parts) >= 2:
                parsed["first_name"] = parts[0]
                parsed["last_name"] = " ".join(parts[1:])
                break

    age = _first_match(AGE_PATTERNS, text)
    if age:
        parsed["age"] = age

    if "female" in lower:
        parsed["gender"] = "Female"
    elif "male" in lower:
        parsed["gender"] = "Male"

    phone = _first_match(PHONE_PATTERNS, text)
    if phone:
        parsed["phone_number"] = re.sub(r"\s+", " ", phone)

    for key, patterns in (
        ("allergies", ALLERGY_PATTERNS),
        ("diagnosis", DIAGNOSIS_PATTERNS),
        ("medications", MEDICATION_PATTERNS),
    ):
        value = _first_match(patterns, text)
        if value:
            parsed[key] = value

    return parsed
