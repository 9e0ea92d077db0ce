"""Prompt templates for the clinical assistant"""

from typing import Any, Dict, List, Optional

COPILOT_SYSTEM_PROMPT = """You are MedSight AI, an expert clinical decision support assistant designed specifically for Nigerian healthcare providers and doctors.

Your expertise includes:

🩺 **Clinical Decision Support**
- Differential diagnosis assistance
- Evidence-based treatment recommendations
- Clinical guideline interpretation (WHO, Nigerian medical protocols)
- Ward round preparation and patient management

💊 **Medication Management**
- Drug interactions and contraindications
- Dosage calculations and adjustments
- Alternative medications when drugs are unavailable
- Cost-effective prescribing for resource-limited settings

🌍 **Nigerian Healthcare Context**
- Common tropical diseases: malaria, typhoid, cholera, Lassa fever
- Endemic conditions: HIV/AIDS, tuberculosis, sickle cell disease
- Hypertension, diabetes, and chronic disease management
- Resource-constrained clinical decision-making

🗣️ **Language & Communication**
- Medical term translations (Yoruba, Igbo, Hausa, Nigerian Pidgin)
- Patient education material in local languages
- Cultural sensitivity in healthcare delivery

⚠️ **Safety & Quality**
- Adverse drug reaction identification
- Patient safety alerts
- Clinical risk assessment
- Infection control guidance

**Response Guidelines:**
1. Be concise and actionable - doctors are busy
2. Provide evidence-based recommendations
3. Consider resource limitations in Nigerian hospitals
4. Flag urgent/critical findings clearly
5. Use bullet points for clarity
6. Include dosing information when relevant
7. Suggest cost-effective alternatives when possible
"""

SUMMARY_SYSTEM_PROMPT = (
    "You are a clinical AI assistant supporting doctors in Nigerian hospitals. "
    "Provide clear, actionable summaries for ward rounds."
)

SAFETY_SYSTEM_PROMPT = "You are a clinical pharmacist AI assistant specialized in medication safety."

INTERACTIONS_SYSTEM_PROMPT = "You are a clinical pharmacist specializing in drug-drug interactions."

LANGUAGE_NAMES = {
    "yoruba": "Yoruba",
    "igbo": "Igbo",
    "hausa": "Hausa",
    "pidgin": "Nigerian Pidgin English",
}

def _allergy_text(allergies: Any) -> str:
    if isinstance(allergies, list) and allergies:
        return ", ".join(str(a) for a in allergies)
    if isinstance(allergies, str) and allergies.strip():
        return allergies
    return "None documented"

def _med_line(med: Dict[str, Any]) -> str:
    return f"{med.get('name', '')} {med.get('dosage') or ''} {med.get('frequency') or ''}".rstrip()

def copilot_system_prompt(patient: Optional[Dict[str, Any]] = None) -> str:
    if not patient:
        return COPILOT_SYSTEM_PROMPT
    return (
        f"{COPILOT_SYSTEM_PROMPT}\n"
        "Current Patient Context:\n"
        f"- Name: {patient.get('first_name', '')} {patient.get('last_name', '')}\n"
        f"- Age: {patient.get('age')} years\n"
        f"- Gender: {patient.get('gender')}\n"
        f"- Allergies: {_allergy_text(patient.get('allergies'))}"
    )

def patient_summary_prompt(
    patient: Dict[str, Any],
    encounters: List[Dict[str, Any]],
    medications: List[Dict[str, Any]]
) -> str:
    encounter_lines = "\n".join(
        f"  • {e.get('diagnosis') or 'General consultation'}"
        + (f" ({e['symptoms']})" if e.get("symptoms") else "")
        for e in encounters[:3]
    )
    med_lines = "\n".join(f"  • {_med_line(m)}" for m in medications[:5])

    return f"""You are a clinical AI assistant supporting doctors in a Nigerian hospital. Provide a clear, actionable summary for ward rounds.

PATIENT: {patient.get('first_name', '')} {patient.get('last_name', '')}, {patient.get('age') or 'age unknown'} years, {patient.get('gender')}
ALLERGIES: {_allergy_text(patient.get('allergies'))}

RECENT ENCOUNTERS ({len(encounters)} total):
{encounter_lines or '  No recent visits'}

CURRENT MEDICATIONS ({len(medications)} total):
{med_lines or '  No active medications'}

Provide a 3-5 bullet point clinical summary focusing on:
- Active medical issues
- Medication safety concerns (interactions, allergies, dosing)
- Priority actions for today
- Any red flags or urgent issues.

Use clear, practical language for busy ward rounds in Nigeria."""

def medication_safety_prompt(patient: Dict[str, Any], medications: List[Dict[str, Any]]) -> str:
    med_lines = "\n".join(f"- {_med_line(m)}" for m in medications)
    return f"""You are a clinical pharmacist AI assistant. Analyze medication safety for this patient:

Patient Profile:
- Age: {patient.get('age') or 'Unknown'}
- Gender: {patient.get('gender') or 'Unknown'}
- Allergies: {_allergy_text(patient.get('allergies'))}

Current Medications:
{med_lines}

Provide a JSON object with fields: riskScore, interactions, allergyConcerns, dosageConcerns, recommendations."""

def drug_interactions_prompt(medications: List[Dict[str, Any]]) -> str:
    drug_names = ", ".join(str(m.get("name", "")) for m in medications)
    return f"""As a clinical pharmacist, identify potential drug-drug interactions between these medications:

Medications: {drug_names}

Provide:
1. Severity (Mild/Moderate/Severe)
2. Specific interaction pairs
3. Clinical significance
4. Recommendations

Keep response concise and clinical."""

def parse_patient_prompt(text: str) -> str:
    return f"""Extract patient information from the following text and return ONLY a valid JSON object with these fields: first_name, last_name, age, gender (Male/Female/Other), phone_number, allergies, diagnosis, medications.

Text: "{text}"

Return only the JSON object, nothing else."""

def translation_prompt(text: str, language: str) -> str:
    name = LANGUAGE_NAMES.get(language, language)
    return f"""Translate this medical instruction from English to {name}:

English: "{text}"

{name}:"""
