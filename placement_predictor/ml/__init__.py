"""
Logistic placement model: feature construction, scoring, and retraining.

Modules
-------
features  : normalize_* transforms + FeatureVector / build_feature_vector().
scoring   : sigmoid(), linear_score(), score() -> ScoreResult.
trainer   : train_coefficients() batch gradient descent, evaluate_accuracy(),
            retrain() -> RetrainResult.
predictor : predict() — score + recommendations in one response object.

Everything here is pure: no DB, no config lookups, no I/O. Callers pass in
the coefficients and hyperparameters explicitly.
"""
