from intakefill.app.models.form_preset import FormPreset
