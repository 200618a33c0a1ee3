"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Race Pacing page: GPX import, pacing inputs, saved configurations and plan.
"""

from __future__ import annotations

from pathlib import Path

import streamlit as st
from streamlit.logger import get_logger

from config import PROFILES
from graph.pacing_profile import render_pacing_profile
from persistence.csv_storage import CsvStorage
from services.pacing.errors import PacingError
from services.pacing.models import PacingRequest, RestPeriods
from services.pacing_presenter import (
    build_per_km_table,
    build_segments_table,
    build_stages_table,
    build_totals_cards,
)
from services.pacing_service import PacingService
from utils.coercion import format_checkpoint_lines, parse_checkpoint_lines
from utils.config import load_config
from utils.constants import (
    PROFILE_LABELS_FR,
    STATE_PACING_FORM,
    STATE_PACING_GPX,
    STATE_PACING_GPX_NAME,
    STATE_PACING_RESULT,
)
from utils.formatting import set_locale
from utils.styling import apply_theme

logger = get_logger(__name__)

st.set_page_config(page_title="Trail Pacer - Race Pacing", layout="wide")
apply_theme()
st.title("Plan d'allure")

cfg = load_config()
set_locale(cfg.locale)
storage = CsvStorage(base_dir=Path(cfg.data_dir))
pacing_service = PacingService(storage)

st.session_state.setdefault(STATE_PACING_GPX, None)
st.session_state.setdefault(STATE_PACING_GPX_NAME, "")
st.session_state.setdefault(STATE_PACING_RESULT, None)
st.session_state.setdefault(
    STATE_PACING_FORM,
    PacingRequest(
        target_time="10:00",
        resample_step_m=cfg.resample_step_m,
        smoothing_window=cfg.smoothing_window,
    ),
)

# Saved configurations
configs_df = pacing_service.list_configurations()
if not configs_df.empty:
    col_sel, col_load, col_del = st.columns([3, 1, 1])
    with col_sel:
        selected_name = st.selectbox(
            "Configurations enregistrées", configs_df["name"].tolist(), key="pacing_config_select"
        )
    with col_load:
        st.write("")
        if st.button("Charger", key="pacing_config_load"):
            loaded = pacing_service.load_configuration(selected_name)
            if loaded is not None:
                st.session_state[STATE_PACING_FORM] = loaded
                st.session_state[STATE_PACING_RESULT] = None
                st.rerun()
    with col_del:
        st.write("")
        if st.button("Supprimer", key="pacing_config_delete"):
            pacing_service.delete_configuration(selected_name)
            st.rerun()

uploaded_file = st.file_uploader("GPX de la course", type=["gpx"], key="pacing_gpx_uploader")
if uploaded_file is not None:
    st.session_state[STATE_PACING_GPX] = uploaded_file.getvalue()
    st.session_state[STATE_PACING_GPX_NAME] = uploaded_file.name

form_defaults: PacingRequest = st.session_state[STATE_PACING_FORM]

with st.form("pacing_form"):
    col1, col2, col3 = st.columns(3)
    with col1:
        target_time = st.text_input("Temps cible (HH:MM ou HH:MM:SS)", value=form_defaults.target_time)
        profile = st.selectbox(
            "Profil",
            PROFILES,
            index=PROFILES.index(form_defaults.profile) if form_defaults.profile in PROFILES else 0,
            format_func=lambda p: PROFILE_LABELS_FR.get(p, p),
        )
        caution = st.slider("Prudence", 0.0, 1.0, float(form_defaults.caution), 0.05)
    with col2:
        checkpoints_text = st.text_area(
            "Points de contrôle (km,minutes d'arrêt, un par ligne)",
            value=format_checkpoint_lines(list(form_defaults.checkpoints)),
            height=150,
        )
    with col3:
        rest_count = st.number_input("Pauses (nombre)", min_value=0, value=int(form_defaults.rest.count), step=1)
        rest_minutes = st.number_input(
            "Durée par pause (min)", min_value=0.0, value=float(form_defaults.rest.minutes_each), step=5.0
        )
        resample_step = st.number_input(
            "Pas de rééchantillonnage (m)", min_value=1.0, value=float(form_defaults.resample_step_m), step=50.0
        )
        smoothing_window = st.number_input(
            "Fenêtre de lissage (impair)", min_value=1, value=int(form_defaults.smoothing_window), step=2
        )
    config_name = st.text_input("Nom de la configuration (pour enregistrer)", value="")
    col_compute, col_save = st.columns(2)
    with col_compute:
        compute_clicked = st.form_submit_button("Calculer le plan")
    with col_save:
        save_clicked = st.form_submit_button("Enregistrer la configuration")

if compute_clicked or save_clicked:
    st.session_state[STATE_PACING_RESULT] = None
    try:
        request = PacingRequest(
            target_time=target_time.strip(),
            profile=profile,
            caution=float(caution),
            checkpoints=tuple(parse_checkpoint_lines(checkpoints_text)),
            rest=RestPeriods(count=int(rest_count), minutes_each=float(rest_minutes)),
            resample_step_m=float(resample_step),
            smoothing_window=int(smoothing_window),
        )
        st.session_state[STATE_PACING_FORM] = request

        if save_clicked:
            pacing_service.save_configuration(config_name, request)
            st.success(f"Configuration « {config_name.strip()} » enregistrée")

        if compute_clicked:
            gpx_bytes = st.session_state.get(STATE_PACING_GPX)
            if not gpx_bytes:
                st.warning("Veuillez d'abord charger un fichier GPX.")
            else:
                st.session_state[STATE_PACING_RESULT] = pacing_service.compute_pacing_from_gpx(gpx_bytes, request)
    except PacingError as e:
        st.error(str(e))
    except Exception as e:
        logger.error("Failed to compute pacing: %s", e, exc_info=True)
        st.error(f"Erreur lors du calcul: {e}")

result = st.session_state.get(STATE_PACING_RESULT)
if result is not None:
    st.subheader("Résumé")
    cards = build_totals_cards(result)
    for start in range(0, len(cards), 5):
        cols = st.columns(5)
        for col, (label, value) in zip(cols, cards[start : start + 5]):
            col.metric(label, value)

    render_pacing_profile(result.segments, result.samples, result.request.checkpoints)

    st.subheader("Étapes")
    st.dataframe(build_stages_table(result.stages), hide_index=True, use_container_width=True)

    st.subheader("Par kilomètre")
    st.dataframe(build_per_km_table(result.per_km), hide_index=True, use_container_width=True)

    with st.expander("Détail des segments", expanded=False):
        st.dataframe(build_segments_table(result.segments), hide_index=True, use_container_width=True)
