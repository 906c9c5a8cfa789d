import torch.nn as nn

class Architecture(nn.Module):
    """Embedding -> Flatten -> Dense(relu) -> Dense(1), one logit per blurb"""
    def __init__(self, vocab_size: int, max_len: int, emb_dim: int = 32, hidden: int = 16):
        super().__init__()
        self.emb = nn.Embedding(vocab_size, emb_dim, padding_idx=0)
        self.flat = nn.Flatten()
        self.hidden = nn.Linear(max_len * emb_dim, hidden)
        self.act = nn.ReLU()
        self.out = nn.Linear(hidden, 1)
    def forward(self, x):          # x: [B, L]
        e = self.flat(self.emb(x)) # [B, L*E]
        h = self.act(self.hidden(e))
        return self.out(h).squeeze(-1)  # [B]
