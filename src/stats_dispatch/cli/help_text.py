EXPLANATIONS = {
    "classify": (
        "Classify reads a dataset and labels every column categorical or numeric. "
        "A column is categorical when its values are not numeric or when it has at most 10 "
        "distinct values, so small integer codes and Likert scales count as categorical. "
        "Columns that are entirely missing are dropped before classification."
    ),
    "tests": (
        "Tests lists the twelve supported hypothesis tests with the variable roles each one "
        "needs. Bind every role with --bind ROLE=COLUMN when running a test."
    ),
    "run": (
        "Run validates the role bindings against the chosen test, executes it on complete "
        "cases only, and interprets the p-value at alpha = 0.05. "
        "t-test accepts --paired and --equal-var (pooled variance; Welch otherwise). "
        "Wilcoxon accepts --paired (signed-rank; rank-sum otherwise). "
        "ANOVA adds Tukey HSD pairwise comparisons. "
        "Validation failures and numerical problems are reported as JSON with exit status 1."
    ),
}
