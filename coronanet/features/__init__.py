from .transforms import count_policies, open_ended, scores_to_timeseries
