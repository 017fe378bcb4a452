"""Prompt builders for every generation operation.

User-facing output is Brazilian Portuguese; the JSON shapes requested here
are the ones the pipeline parses.
"""

import json

from niume_ai.domain.profile import Goal, TrainingLocation, TrainingProfile

_GOAL_LABELS = {
    Goal.LOSE_WEIGHT: "Perda de Peso",
    Goal.GAIN_MUSCLE: "Hipertrofia Muscular",
    Goal.MAINTAIN: "Manutenção",
    Goal.GAIN_WEIGHT: "Ganho de Massa",
}

CHAT_WORD_BUDGET = 200


def food_text_prompt(description: str) -> str:
    return f"""Você é um nutricionista especialista. Analise o texto abaixo e identifique se ele contém um ou mais alimentos.
ALIMENTO/REFEIÇÃO: {json.dumps(description, ensure_ascii=False)}
REGRAS:
1. SEPARAÇÃO: Se o usuário descrever múltiplos itens, separe-os em itens individuais.
2. PRATOS COMPOSTOS: Se for um prato conhecido (ex: "strogonoff", "feijoada"), trate como UM ÚNICO item.
3. VALORES: Forneça os valores nutricionais baseados em 100g para cada item.
4. PESO UNITÁRIO: No campo "unit_weight", estime o peso em gramas de UMA ÚNICA UNIDADE (ex: um biscoito=12, um ovo=50). Se for um prato de comida, use o peso de uma porção média (ex: 300). NUNCA use o peso de um pacote grande.

Retorne APENAS um objeto JSON:
{{ "items": [{{ "description": "Nome", "calories": 100, "protein": 5, "carbs": 20, "fat": 2, "unit_weight": 100 }}] }}"""


def food_photo_prompt() -> str:
    return """Identifique TODOS os alimentos e itens individuais visíveis nesta foto. Para CADA item, estime os valores nutricionais em português brasileiro.
Retorne APENAS um objeto JSON:
{ "items": [{ "description": "Nome", "calories": 130, "protein": 2, "carbs": 28, "fat": 0, "unit_weight": 100 }] }
REGRAS: Liste cada componente individualmente. "description" deve ser apenas o nome curto do alimento. Estime valores realistas por 100g. No campo "unit_weight", estime o peso de uma unidade comum desse alimento em gramas. Apenas números inteiros."""


def workout_plan_prompt(profile: TrainingProfile) -> str:
    if profile.active_days:
        days_rule = (
            "- DIAS DA SEMANA: treinar APENAS em "
            f"{', '.join(profile.active_days)}. Os outros dias devem ser de "
            'descanso (type: "rest").'
        )
    else:
        days_rule = "- Planeje de SEGUNDA a DOMINGO com 1 a 2 dias de descanso."
    return f"""Persona: Personal Trainer. Crie um plano de treino JSON.
Perfil: {_GOAL_LABELS[profile.goal]}, {_location_label(profile.training_location)}, {profile.available_minutes}min/dia, {profile.weight:g}kg.
Instruções: 4 semanas (7 dias cada). IDs numéricos de 4 dígitos do ExerciseDB (ex: "0009"). Instruções CURTAS.
{days_rule}

Formato:
{{ "name": "...", "weeks": [{{ "week": 1, "days": [{{ "day": 1, "name": "...", "type": "strength", "exercises": [{{ "exercise_id": "0009", "name": "...", "sets": 3, "reps": "12", "rest_seconds": 60, "instructions": "..." }}] }}] }}] }}"""


def workout_day_prompt(
    profile: TrainingProfile,
    day_name: str,
    available_minutes: int,
    location: TrainingLocation,
    avoid_exercises: list[str],
) -> str:
    avoid = ", ".join(avoid_exercises) if avoid_exercises else "Nenhum"
    max_exercises = max(1, available_minutes // 5)
    return f"""Você é um personal trainer especialista. Crie APENAS UM DIA de treino em JSON para: {day_name}.
PERFIL: objetivo {_GOAL_LABELS[profile.goal]}, local {_location_label(location)}, {available_minutes} minutos, peso {profile.weight:g}kg, idade {profile.age} anos.
REGRAS:
- Evite repetir estes exercícios já feitos na semana: {avoid}.
- "exercise_id" deve ser um ID numérico de 4 dígitos do ExerciseDB (ex: "0009").
- Máximo de {max_exercises} exercícios.
Retorne APENAS JSON válido:
{{ "day": 1, "name": "...", "type": "strength", "exercises": [{{ "exercise_id": "0009", "name": "...", "sets": 3, "reps": "10-12", "rest_seconds": 60, "instructions": "...", "tips": "..." }}] }}"""


def cardio_plan_prompt(
    profile: TrainingProfile,
    cardio_type: str,
    active_days: list[str],
    goal_minutes: int,
) -> str:
    days = ", ".join(active_days) if active_days else "3 dias alternados"
    return f"""Persona: Personal Trainer. Crie um plano de cardio JSON de 4 semanas.
Tipo de cardio: {json.dumps(cardio_type, ensure_ascii=False)}. Dias: {days}. Duração por sessão: {goal_minutes}min.
Perfil: {_GOAL_LABELS[profile.goal]}, {profile.age} anos, {profile.weight:g}kg. Progrida a intensidade semana a semana. Instruções CURTAS.

Formato:
{{ "name": "...", "weeks": [{{ "week": 1, "days": [{{ "day": 1, "name": "...", "type": "cardio", "exercises": [{{ "name": "...", "duration_minutes": 30, "intensity": "moderada", "instructions": "..." }}] }}] }}] }}"""


def modality_plan_prompt(profile: TrainingProfile, modality: str) -> str:
    return f"""Persona: Personal Trainer. Crie um plano de treino JSON de 4 semanas para a modalidade {json.dumps(modality, ensure_ascii=False)}.
Perfil: {_GOAL_LABELS[profile.goal]}, {profile.available_minutes}min/dia, {profile.age} anos, {profile.weight:g}kg. Instruções CURTAS.

Formato:
{{ "name": "...", "weeks": [{{ "week": 1, "days": [{{ "day": 1, "name": "...", "type": "modality", "exercises": [{{ "name": "...", "sets": 3, "reps": "12", "rest_seconds": 60, "instructions": "..." }}] }}] }}] }}"""


def modality_exercises_prompt(modality: str, count: int) -> str:
    return f"""Liste {count} exercícios para a modalidade {json.dumps(modality, ensure_ascii=False)}, em português.
Retorne APENAS um objeto JSON: {{ "exercises": [{{ "name": "...", "muscle_group": "...", "instructions": "..." }}] }}"""


def diet_plan_prompt(profile: TrainingProfile, daily_calories: int) -> str:
    favorites = ", ".join(profile.food_preferences) or "variado"
    at_home = ", ".join(profile.foods_at_home) or "alimentos básicos"
    return f"""Você é um nutricionista. Crie um plano alimentar diário personalizado em JSON.
PERFIL:
- Objetivo: {_GOAL_LABELS[profile.goal]}
- Meta calórica diária: {daily_calories} kcal
- Alimentos favoritos: {favorites}
- Sempre tem em casa: {at_home}
- Peso: {profile.weight:g}kg | Altura: {profile.height:g}cm

Retorne APENAS JSON válido:
{{ "daily_calories": {daily_calories}, "macros": {{ "protein": 0, "carbs": 0, "fat": 0 }}, "meals": [{{ "type": "Café da manhã", "time": "07:00", "calories": 0, "options": ["Opção 1", "Opção 2"] }}], "tips": ["Dica 1"] }}"""


def suggest_units_prompt(food: str) -> str:
    return f"""Para o alimento {json.dumps(food, ensure_ascii=False)}, liste as 4 a 6 unidades de medida mais comuns em português brasileiro.
Retorne APENAS um objeto JSON: {{ "units": ["unidade", "gramas", "xícara"] }}"""


def suggest_foods_prompt(query: str) -> str:
    return f"""Liste 6 a 8 variações comuns do alimento {json.dumps(query, ensure_ascii=False)} em português, como aparecem na tabela TACO.
Retorne APENAS um objeto JSON: {{ "foods": ["Variação 1", "Variação 2"] }}"""


def body_photo_prompt() -> str:
    return """Analise esta foto corporal como personal trainer profissional. Descreva em português:
1. Estimativa visual de % de gordura corporal
2. Pontos fortes
3. Áreas com maior potencial de melhoria
4. Foco recomendado para o treino
Seja encorajador e construtivo. Máximo 3 parágrafos. Responda em texto simples, não JSON."""


def exercise_instructions_prompt(exercise_name: str) -> str:
    return (
        "Gere instruções de execução (2-3 frases) para o exercício "
        f"{json.dumps(exercise_name, ensure_ascii=False)}. Seja técnico, em português."
    )


def chat_prompt(message: str, context: str) -> str:
    return f"""Você é o Pers, personal trainer do app niume. Você é motivador, direto e especialista em fitness e nutrição.
CONTEXTO DO USUÁRIO: {context}
MENSAGEM DO USUÁRIO: {message}
Responda em português do Brasil, de forma amigável e técnica. Máximo de {CHAT_WORD_BUDGET} palavras."""


def moderate_text_prompt(value: str, context: str) -> str:
    return (
        f"Avalie se este nome é adequado para um app fitness: {json.dumps(value, ensure_ascii=False)}. "
        f"Contexto: cadastro de {context}. Responda APENAS com uma linha: "
        "APPROVED ou BLOCKED: <motivo curto em português>"
    )


def moderate_photo_prompt() -> str:
    return (
        "This image was submitted as a profile photo for a fitness app. Is it "
        "appropriate for public display in a health and wellness context? Reply "
        "with exactly one line: APPROVED or BLOCKED: <short reason in Portuguese>."
    )


def _location_label(location: TrainingLocation) -> str:
    if location is TrainingLocation.HOME:
        return "em casa (sem equipamentos ou com itens básicos)"
    return "academia (com equipamentos)"
